"""Shared pytest fixtures for lifecycled tests."""

import json
import threading
from typing import Any, Callable
from unittest.mock import Mock

import pytest

from lifecycled.domain.lifecycle_message import (
    TERMINATING_TRANSITION,
    LifecycleMessage,
    QueueMessage,
)

INSTANCE_ID = "i-1"


def make_body(
    instance_id: str = INSTANCE_ID,
    transition: str = TERMINATING_TRANSITION,
    **fields: Any,
) -> str:
    """Build an SNS envelope carrying a lifecycle hook message.

    Args:
        instance_id: EC2InstanceId of the inner message
        transition: LifecycleTransition of the inner message
        **fields: Extra or overriding inner fields

    Returns:
        Raw message body
    """
    message = {
        "EC2InstanceId": instance_id,
        "LifecycleTransition": transition,
        "AutoScalingGroupName": "g",
        "LifecycleActionToken": "t",
        "LifecycleHookName": "h",
        **fields,
    }
    return json.dumps({"Type": "Notification", "Subject": "x", "Message": json.dumps(message)})


@pytest.fixture
def terminating_body() -> str:
    """Raw body of a termination event for instance i-1.

    Returns:
        Raw message body
    """
    return (
        '{"Type":"Notification","Subject":"x","Message":"{\\"EC2InstanceId\\":\\"i-1\\",'
        '\\"LifecycleTransition\\":\\"autoscaling:EC2_INSTANCE_TERMINATING\\",'
        '\\"AutoScalingGroupName\\":\\"g\\",\\"LifecycleActionToken\\":\\"t\\",'
        '\\"LifecycleHookName\\":\\"h\\"}"}'
    )


@pytest.fixture
def sample_message() -> LifecycleMessage:
    """Create a decoded termination message for testing.

    Returns:
        LifecycleMessage instance
    """
    return LifecycleMessage(
        time=None,
        group_name="g",
        instance_id=INSTANCE_ID,
        action_token="t",
        transition=TERMINATING_TRANSITION,
        hook_name="h",
    )


@pytest.fixture
def shutdown_event() -> threading.Event:
    """Create an unset shutdown event.

    Returns:
        threading.Event instance
    """
    return threading.Event()


@pytest.fixture
def scripted_channel(
    shutdown_event: threading.Event,
) -> Callable[[list[Any]], Mock]:
    """Build a mock event channel that replays scripted poll results.

    Each entry is either a list of bodies (one poll's batch) or an exception
    raised by that poll. Once the script is exhausted the shutdown event is
    set so the listener stops.

    Returns:
        Factory taking the script and returning the mock channel
    """

    def factory(script: list[Any]) -> Mock:
        channel = Mock()
        remaining = list(script)
        counter = iter(range(1, 10_000))

        def get_messages(event: threading.Event) -> list[QueueMessage]:
            if not remaining:
                shutdown_event.set()
                return []
            batch = remaining.pop(0)
            if isinstance(batch, Exception):
                raise batch
            return [QueueMessage(receipt_handle=f"rh-{next(counter)}", body=b) for b in batch]

        channel.get_messages.side_effect = get_messages
        return channel

    return factory
