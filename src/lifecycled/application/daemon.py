#!/usr/bin/env python3
"""
Daemon that runs the listeners and handles the first termination notice.

Every listener runs on its own worker thread and shares one single-slot notice
queue. The first notice stops the remaining listeners and is handled with the
caller's shutdown event.
"""

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Protocol

from lifecycled.application.notice_handler import handle_notice
from lifecycled.domain.termination_notice import Handler, NoticeKind, TerminationNotice
from lifecycled.infrastructure.logger import log_operation

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "daemon",
        "description": "Runs listeners and handles the first termination notice",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


class Listener(Protocol):
    """Protocol shared by all listeners."""

    def type(self) -> NoticeKind:
        """Return the kind of notice this listener produces."""
        ...

    def start(
        self,
        shutdown_event: threading.Event,
        notices: "queue.Queue[TerminationNotice]",
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        """Listen until a notice is published or shutdown_event is set."""
        ...


class Daemon:
    """Runs listeners and handles the first termination notice they produce."""

    WAIT_INTERVAL = 0.5

    def __init__(self, listeners: list[Listener], handler: Handler) -> None:
        """Initialize the daemon.

        Args:
            listeners: Listeners to run concurrently
            handler: Handler to run for the first notice

        Raises:
            ValueError: If no listeners are given
        """
        if not listeners:
            raise ValueError("At least one listener is required")
        self.listeners = listeners
        self.handler = handler

    def start(
        self,
        shutdown_event: threading.Event,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> bool:
        """Run until a notice has been handled or shutdown_event is set.

        Args:
            shutdown_event: Set to shut the daemon down
            log: Optional logger (defaults to this module's logger)

        Returns:
            True if a termination notice was handled, False on shutdown

        Raises:
            SetupError: If a listener could not be set up
            Exception: The handler's own failure
        """
        log = log or logger
        listener_stop = threading.Event()
        notices: "queue.Queue[TerminationNotice]" = queue.Queue(maxsize=1)

        executor = ThreadPoolExecutor(
            max_workers=len(self.listeners), thread_name_prefix="Listener"
        )
        try:
            futures: dict[Future, Listener] = {}
            for listener in self.listeners:
                log_operation(log, "Starting listener", {"listener": listener.type().value})
                futures[executor.submit(listener.start, listener_stop, notices, log)] = listener

            notice = self._wait_for_notice(shutdown_event, notices, futures, log)
            listener_stop.set()

            if notice is None:
                log.info("Shutting down without a termination notice")
                return False

            handle_notice(shutdown_event, self.handler, notice, log)
            return True
        finally:
            listener_stop.set()
            executor.shutdown(wait=True)

    def _wait_for_notice(
        self,
        shutdown_event: threading.Event,
        notices: "queue.Queue[TerminationNotice]",
        futures: dict[Future, Listener],
        log: logging.Logger | logging.LoggerAdapter,
    ) -> TerminationNotice | None:
        while not shutdown_event.is_set():
            try:
                return notices.get(timeout=self.WAIT_INTERVAL)
            except queue.Empty:
                pass

            for future, listener in futures.items():
                if future.done() and future.exception() is not None:
                    log_operation(
                        log,
                        "Listener failed",
                        {"listener": listener.type().value, "error": future.exception()},
                        level=logging.ERROR,
                    )
                    raise future.exception()

            if all(future.done() for future in futures):
                # A listener may have published just before exiting
                try:
                    return notices.get_nowait()
                except queue.Empty:
                    log.warning("All listeners exited without a termination notice")
                    return None

        return None


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
