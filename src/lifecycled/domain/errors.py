#!/usr/bin/env python3
"""
Error types for lifecycled.

Only SetupError and the handler's own failure are ever raised to callers of a
listener or notice; the rest exist so that absorbed failures are logged with a
consistent type.
"""

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "errors",
        "description": "Error taxonomy for lifecycled",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


class LifecycledError(Exception):
    """Base class for lifecycled errors."""


class SetupError(LifecycledError):
    """The event channel could not be created or subscribed."""


class TransientPollError(LifecycledError):
    """Polling the event channel failed; the listener keeps polling."""


class DecodeError(LifecycledError):
    """An event could not be decoded.

    Attributes:
        layer: Which layer failed to decode ("envelope" or "message")
    """

    ENVELOPE = "envelope"
    MESSAGE = "message"

    def __init__(self, layer: str, reason: str) -> None:
        super().__init__(f"Failed to decode {layer}: {reason}")
        self.layer = layer
        self.reason = reason


class TeardownError(LifecycledError):
    """Unsubscribing or deleting the event channel failed."""


class HeartbeatError(LifecycledError):
    """Recording a lifecycle action heartbeat failed."""


class CompletionError(LifecycledError):
    """Completing the lifecycle action failed."""


class HandlerError(LifecycledError):
    """The termination handler failed.

    Attributes:
        exit_code: Exit status of the handler process, if it ran
    """

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
