#!/usr/bin/env python3
"""
Domain model for autoscaling lifecycle events.

An event arrives as an SNS envelope whose Message field holds the lifecycle
hook notification as a JSON string. Both layers are decoded here, and the
termination filter decides whether a decoded message concerns this instance.
"""

import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from lifecycled.domain.errors import DecodeError

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "lifecycle_message",
        "description": "Domain model for lifecycle events",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


TERMINATING_TRANSITION = "autoscaling:EC2_INSTANCE_TERMINATING"

_FRACTION = re.compile(r"\.(\d+)")


@dataclass(frozen=True)
class QueueMessage:
    """A raw item received from the event channel.

    Attributes:
        receipt_handle: Handle used to acknowledge (delete) the item
        body: Undecoded message body
    """

    receipt_handle: str
    body: str


@dataclass(frozen=True)
class Envelope:
    """Immutable SNS notification envelope.

    Attributes:
        type: Notification type (e.g., Notification)
        subject: Notification subject
        time: When the notification was published, if present
        message: Inner message, still encoded as a JSON string
    """

    type: str
    subject: str
    time: datetime | None
    message: str


@dataclass(frozen=True)
class LifecycleMessage:
    """Immutable autoscaling lifecycle hook notification.

    Attributes:
        time: When the lifecycle transition started, if present
        group_name: Auto Scaling group name
        instance_id: EC2 instance the transition applies to
        action_token: Token identifying the pending lifecycle action
        transition: Lifecycle transition (e.g., autoscaling:EC2_INSTANCE_TERMINATING)
        hook_name: Lifecycle hook name
    """

    time: datetime | None
    group_name: str
    instance_id: str
    action_token: str
    transition: str
    hook_name: str

    def is_terminating(self) -> bool:
        """Check if this message announces an instance termination.

        Returns:
            True if the transition is the terminating transition
        """
        return self.transition == TERMINATING_TRANSITION


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp as sent by SNS and autoscaling.

    Args:
        value: Timestamp string (e.g., 2026-01-01T12:00:00.123Z)

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # fromisoformat only takes microsecond precision
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    return datetime.fromisoformat(value)


def _load_object(raw: str, layer: str) -> dict[str, Any]:
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DecodeError(layer, str(e)) from e

    if not isinstance(document, dict):
        raise DecodeError(layer, f"expected a JSON object, got {type(document).__name__}")

    return document


def _lookup(document: dict[str, Any], key: str) -> Any:
    if key in document:
        return document[key]
    folded = key.casefold()
    for name, value in document.items():
        if name.casefold() == folded:
            return value
    return None


def _get_string(document: dict[str, Any], key: str, layer: str) -> str:
    value = _lookup(document, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(layer, f"field {key} must be a string")
    return value


def _get_time(document: dict[str, Any], layer: str) -> datetime | None:
    if _lookup(document, "Time") is None:
        return None
    value = _get_string(document, "Time", layer)
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise DecodeError(layer, f"invalid Time {value!r}") from e


def decode_envelope(raw: str) -> Envelope:
    """Decode the outer SNS envelope of a queue message body.

    Args:
        raw: Raw message body

    Returns:
        Decoded Envelope

    Raises:
        DecodeError: If the body is not a valid envelope
    """
    layer = DecodeError.ENVELOPE
    document = _load_object(raw, layer)

    return Envelope(
        type=_get_string(document, "Type", layer),
        subject=_get_string(document, "Subject", layer),
        time=_get_time(document, layer),
        message=_get_string(document, "Message", layer),
    )


def decode_message(envelope: Envelope) -> LifecycleMessage:
    """Decode the lifecycle message carried by an envelope.

    Args:
        envelope: Decoded envelope

    Returns:
        Decoded LifecycleMessage

    Raises:
        DecodeError: If the inner message is not a valid lifecycle message
    """
    layer = DecodeError.MESSAGE
    document = _load_object(envelope.message, layer)

    return LifecycleMessage(
        time=_get_time(document, layer),
        group_name=_get_string(document, "AutoScalingGroupName", layer),
        instance_id=_get_string(document, "EC2InstanceId", layer),
        action_token=_get_string(document, "LifecycleActionToken", layer),
        transition=_get_string(document, "LifecycleTransition", layer),
        hook_name=_get_string(document, "LifecycleHookName", layer),
    )


def is_termination_for(message: LifecycleMessage, instance_id: str) -> bool:
    """Check if a message is a termination notice for the given instance.

    Args:
        message: Decoded lifecycle message
        instance_id: Instance ID the listener was configured with

    Returns:
        True if the message targets instance_id and is a terminating transition
    """
    return message.instance_id == instance_id and message.is_terminating()


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
