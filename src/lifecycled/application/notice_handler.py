#!/usr/bin/env python3
"""
Hand-off and handling of termination notices.

Listeners publish at most one notice onto a single-slot queue; the consumer
takes it and handles it exactly once.
"""

import logging
import queue
import threading

from lifecycled.domain.termination_notice import Handler, TerminationNotice
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
        "name": "notice_handler",
        "description": "Hand-off and handling of termination notices",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


PUBLISH_TIMEOUT = 1.0


def publish_notice(
    notices: "queue.Queue[TerminationNotice]",
    notice: TerminationNotice,
    shutdown_event: threading.Event,
) -> bool:
    """Put a notice on the hand-off queue.

    Blocks while the slot is taken, but gives up once shutdown_event is set so
    that a listener never outlives the daemon waiting on a full queue.

    Args:
        notices: Single-slot notice queue
        notice: Notice to publish
        shutdown_event: Set when the listener should stop

    Returns:
        True if the notice was published
    """
    while not shutdown_event.is_set():
        try:
            notices.put(notice, timeout=PUBLISH_TIMEOUT)
            return True
        except queue.Full:
            continue
    return False


def handle_notice(
    shutdown_event: threading.Event,
    handler: Handler,
    notice: TerminationNotice,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> None:
    """Handle a termination notice.

    Args:
        shutdown_event: Set when the daemon is shutting down; passed to the handler
        handler: Termination handler to run
        notice: Notice to handle
        log: Optional logger (defaults to this module's logger)

    Raises:
        Exception: The handler's own failure, unchanged
    """
    log = with_fields(log or logger, notice=notice.type().value)
    log.info("Executing termination handler")
    notice.handle(shutdown_event, handler, log)
    log.info("Termination handler finished")


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
