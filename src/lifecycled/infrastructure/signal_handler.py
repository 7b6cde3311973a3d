#!/usr/bin/env python3
"""
Signal handler for graceful shutdown.

Turns SIGINT and SIGTERM into a shutdown event that listeners and handlers
observe, so that queues are torn down before the process exits.
"""

import logging
import signal
import threading

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "signal_handler",
        "description": "Signal handler for graceful shutdown",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


class ShutdownCoordinator:
    """Sets a shutdown event on SIGINT/SIGTERM."""

    def __init__(self, shutdown_event: threading.Event | None = None) -> None:
        """Initialize the shutdown coordinator.

        Args:
            shutdown_event: Event to set on shutdown (a new one if omitted)
        """
        self.shutdown_event = shutdown_event or threading.Event()
        self._original_sigint_handler = None
        self._original_sigterm_handler = None

    def is_shutdown_requested(self) -> bool:
        """Check if shutdown has been requested.

        Returns:
            True if shutdown was requested
        """
        return self.shutdown_event.is_set()

    def setup_signal_handlers(self) -> None:
        """Setup signal handlers for SIGINT and SIGTERM."""
        self._original_sigint_handler = signal.signal(signal.SIGINT, self._signal_handler)
        self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._signal_handler)

    def restore_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if self._original_sigint_handler is not None:
            signal.signal(signal.SIGINT, self._original_sigint_handler)
        if self._original_sigterm_handler is not None:
            signal.signal(signal.SIGTERM, self._original_sigterm_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """Handle SIGINT and SIGTERM signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        self.shutdown_event.set()

        # A second signal falls through to the original handler
        self.restore_signal_handlers()


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
