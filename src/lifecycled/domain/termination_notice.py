#!/usr/bin/env python3
"""
Domain model for termination notices.

A notice is the single value a listener hands over once it has confirmed that
this instance is being terminated. Each listener produces its own notice
variant; all of them satisfy the TerminationNotice protocol.
"""

import logging
import threading
from enum import Enum
from typing import Protocol

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "termination_notice",
        "description": "Domain model for termination notices",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


class NoticeKind(Enum):
    """Enumeration of termination notice sources."""

    AUTOSCALING = "autoscaling"
    SPOT = "spot"


class Handler(Protocol):
    """Protocol for the operator-supplied termination handler."""

    def execute(
        self, shutdown_event: threading.Event, transition: str, instance_id: str
    ) -> None:
        """Run the handler to completion.

        Args:
            shutdown_event: Set when the daemon is shutting down
            transition: Lifecycle transition that triggered the handler
            instance_id: Instance being terminated

        Raises:
            Exception: Any failure of the handler, propagated unchanged
        """
        ...


class TerminationNotice(Protocol):
    """Protocol shared by every termination notice variant."""

    def type(self) -> NoticeKind:
        """Return the kind of listener that produced this notice."""
        ...

    def handle(
        self,
        shutdown_event: threading.Event,
        handler: Handler,
        logger: logging.Logger | logging.LoggerAdapter,
    ) -> None:
        """Run the handler for this notice.

        Args:
            shutdown_event: Set when the daemon is shutting down
            handler: Termination handler to run
            logger: Logger for this handling cycle

        Raises:
            Exception: The handler's own failure
        """
        ...


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
