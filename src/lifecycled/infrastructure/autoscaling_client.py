#!/usr/bin/env python3
"""
Auto Scaling lifecycle action client.

Provides a concrete implementation of the LifecycleActionClient protocol using
boto3.
"""

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from lifecycled.infrastructure.retry import with_retry

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "autoscaling_client",
        "description": "Auto Scaling lifecycle action client",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


CONNECT_TIMEOUT_SECONDS = 5
READ_TIMEOUT_SECONDS = 10

# Retries are handled by with_retry
CLIENT_CONFIG = Config(
    connect_timeout=CONNECT_TIMEOUT_SECONDS,
    read_timeout=READ_TIMEOUT_SECONDS,
    retries={"max_attempts": 1},
)


class AutoscalingClient:
    """Client for lifecycle action heartbeats and completion."""

    def __init__(self, region: str, session: boto3.Session | None = None) -> None:
        """Initialize the client.

        Args:
            region: AWS region
            session: Optional boto3 session to build the client from
        """
        self.region = region
        self._session = session or boto3.Session(region_name=region)
        self._client: Any = None

    def _get_autoscaling_client(self) -> Any:
        if self._client is None:
            self._client = self._session.client("autoscaling", config=CLIENT_CONFIG)
        return self._client

    def record_heartbeat(
        self, group_name: str, hook_name: str, instance_id: str, action_token: str
    ) -> None:
        """Extend the timeout of a pending lifecycle action.

        Args:
            group_name: Auto Scaling group name
            hook_name: Lifecycle hook name
            instance_id: Instance ID
            action_token: Lifecycle action token

        Raises:
            RuntimeError: If the heartbeat could not be recorded
        """

        @with_retry()
        def _record_heartbeat_impl() -> None:
            self._get_autoscaling_client().record_lifecycle_action_heartbeat(
                AutoScalingGroupName=group_name,
                LifecycleHookName=hook_name,
                InstanceId=instance_id,
                LifecycleActionToken=action_token,
            )

        try:
            _record_heartbeat_impl()
        except ClientError as e:
            raise RuntimeError(f"Failed to record heartbeat for {instance_id}: {e}") from e

    def complete_action(
        self,
        group_name: str,
        hook_name: str,
        instance_id: str,
        action_token: str,
        result: str,
    ) -> None:
        """Complete a pending lifecycle action.

        Args:
            group_name: Auto Scaling group name
            hook_name: Lifecycle hook name
            instance_id: Instance ID
            action_token: Lifecycle action token
            result: Action result (CONTINUE or ABANDON)

        Raises:
            RuntimeError: If the lifecycle action could not be completed
        """

        @with_retry()
        def _complete_action_impl() -> None:
            self._get_autoscaling_client().complete_lifecycle_action(
                AutoScalingGroupName=group_name,
                LifecycleHookName=hook_name,
                InstanceId=instance_id,
                LifecycleActionToken=action_token,
                LifecycleActionResult=result,
            )

        try:
            _complete_action_impl()
        except ClientError as e:
            raise RuntimeError(
                f"Failed to complete lifecycle action for {instance_id}: {e}"
            ) from e


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
