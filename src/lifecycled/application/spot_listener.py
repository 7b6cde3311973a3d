#!/usr/bin/env python3
"""
Listener for spot instance interruptions.

Polls the instance metadata service for a scheduled spot termination. Spot
interruptions have no lifecycle action, so the notice only runs the handler.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from lifecycled.application.notice_handler import publish_notice
from lifecycled.domain.termination_notice import Handler, NoticeKind, TerminationNotice
from lifecycled.infrastructure.logger import with_fields

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "spot_listener",
        "description": "Listener for spot instance interruptions",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


SPOT_TERMINATION_TRANSITION = "ec2:SPOT_INSTANCE_TERMINATION"


class SpotMetadata(Protocol):
    """Protocol for the metadata lookups the spot listener needs."""

    def get_spot_termination_time(self) -> datetime | None:
        """Return the scheduled termination time, or None."""
        ...


@dataclass
class SpotTerminationNotice:
    """Termination notice produced by the spot listener.

    Attributes:
        instance_id: Instance being interrupted
        termination_time: When EC2 will terminate the instance
    """

    instance_id: str
    termination_time: datetime
    transition: str = SPOT_TERMINATION_TRANSITION
    kind: NoticeKind = field(default=NoticeKind.SPOT, init=False)

    def type(self) -> NoticeKind:
        """Return the kind of listener that produced this notice."""
        return self.kind

    def handle(
        self,
        shutdown_event: threading.Event,
        handler: Handler,
        logger: logging.Logger | logging.LoggerAdapter,
    ) -> None:
        """Run the handler. There is no lifecycle action to keep alive or complete.

        Raises:
            Exception: The handler's own failure
        """
        handler.execute(shutdown_event, self.transition, self.instance_id)


class SpotListener:
    """Listens for spot instance termination notices."""

    def __init__(self, instance_id: str, metadata: SpotMetadata, interval: float = 5.0) -> None:
        """Initialize the listener.

        Args:
            instance_id: Instance running this daemon
            metadata: Instance metadata client
            interval: Seconds between metadata checks
        """
        self.instance_id = instance_id
        self.metadata = metadata
        self.interval = interval

    def type(self) -> NoticeKind:
        """Return the kind of notice this listener produces."""
        return NoticeKind.SPOT

    def start(
        self,
        shutdown_event: threading.Event,
        notices: "queue.Queue[TerminationNotice]",
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Poll until a spot termination is scheduled or shutdown is set.

        Args:
            shutdown_event: Set to stop listening
            notices: Single-slot queue receiving the notice
            log: Optional logger (defaults to this module's logger)
        """
        log = with_fields(log or logger, listener=self.type().value)

        while not shutdown_event.wait(self.interval):
            log.debug("Polling ec2 metadata for spot termination notices")
            try:
                termination_time = self.metadata.get_spot_termination_time()
            except ValueError as e:
                log.error(f"Failed to parse termination time: {e}")
                continue
            except Exception as e:
                log.debug(f"No spot termination notice: {e}")
                continue

            if termination_time is None:
                continue

            log.info(f"Received spot termination notice (termination_time={termination_time.isoformat()})")
            publish_notice(
                notices,
                SpotTerminationNotice(
                    instance_id=self.instance_id, termination_time=termination_time
                ),
                shutdown_event,
            )
            return


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
