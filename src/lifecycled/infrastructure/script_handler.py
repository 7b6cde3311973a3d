#!/usr/bin/env python3
"""
Handler that runs an operator-supplied script.

The script is invoked as `<script> <transition> <instance-id>` and inherits
the daemon's stdout and stderr.
"""

import logging
import os
import subprocess
import threading

from lifecycled.domain.errors import HandlerError

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "script_handler",
        "description": "Handler that runs an operator-supplied script",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


class ScriptHandler:
    """Runs a script when a termination notice arrives."""

    POLL_INTERVAL = 0.5
    TERMINATE_GRACE_SECONDS = 10

    def __init__(self, path: str) -> None:
        """Initialize the handler.

        Args:
            path: Path to an executable script
        """
        self.path = path

    def validate(self) -> None:
        """Check that the script exists and is executable.

        Raises:
            ValueError: If the script is missing or not executable
        """
        if not os.path.isfile(self.path):
            raise ValueError(f"Handler script not found: {self.path}")
        if not os.access(self.path, os.X_OK):
            raise ValueError(f"Handler script is not executable: {self.path}")

    def execute(
        self, shutdown_event: threading.Event, transition: str, instance_id: str
    ) -> None:
        """Run the script and wait for it to exit.

        If shutdown_event is set while the script runs, the script is sent
        SIGTERM and killed if it has not exited after a grace period.

        Args:
            shutdown_event: Set when the daemon is shutting down
            transition: Lifecycle transition passed as first argument
            instance_id: Instance ID passed as second argument

        Raises:
            HandlerError: If the script cannot be started or exits non-zero
        """
        logger.info(f"Executing handler {self.path} ({transition}, {instance_id})")

        try:
            process = subprocess.Popen([self.path, transition, instance_id])
        except OSError as e:
            raise HandlerError(f"Failed to start handler {self.path}: {e}") from e

        while True:
            try:
                exit_code = process.wait(timeout=self.POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if not shutdown_event.is_set():
                    continue

            logger.warning(f"Shutdown requested, terminating handler {self.path}")
            process.terminate()
            try:
                exit_code = process.wait(timeout=self.TERMINATE_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                process.kill()
                exit_code = process.wait()
            break

        if exit_code != 0:
            raise HandlerError(
                f"Handler {self.path} exited with status {exit_code}", exit_code=exit_code
            )

        logger.info(f"Handler {self.path} finished successfully")


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
