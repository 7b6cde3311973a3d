#!/usr/bin/env python3
"""
Configuration management for lifecycled.

Handles loading and validation of daemon settings from the environment;
command-line flags override them in the CLI.
"""

import os
from dataclasses import dataclass
from typing import Optional

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "config",
        "description": "Configuration management",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


@dataclass
class DaemonConfig:
    """Daemon configuration settings.

    Attributes:
        handler_path: Script to run when a termination notice arrives
        instance_id: Instance to watch (looked up from metadata if unset)
        sns_topic: SNS topic ARN the lifecycle hook publishes to (optional)
        enable_spot_listener: Whether to watch for spot terminations
        heartbeat_interval: Seconds between lifecycle action heartbeats
        spot_poll_interval: Seconds between spot termination checks
        region: AWS region
        verbose: Whether to log at DEBUG level
    """

    handler_path: str
    instance_id: Optional[str] = None
    sns_topic: Optional[str] = None
    enable_spot_listener: bool = True
    heartbeat_interval: float = 10.0
    spot_poll_interval: float = 5.0
    region: str = "us-east-1"
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "DaemonConfig":
        """Load configuration from environment variables.

        Returns:
            DaemonConfig instance

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        return cls(
            handler_path=os.getenv("LIFECYCLED_HANDLER", ""),
            instance_id=os.getenv("LIFECYCLED_INSTANCE_ID") or None,
            sns_topic=os.getenv("LIFECYCLED_SNS_TOPIC") or None,
            enable_spot_listener=os.getenv("LIFECYCLED_NO_SPOT", "false").lower() != "true",
            heartbeat_interval=float(os.getenv("LIFECYCLED_HEARTBEAT_INTERVAL", "10")),
            region=os.getenv("AWS_REGION", "us-east-1"),
        )

    def validate(self) -> None:
        """Check that the configuration can run a daemon.

        Raises:
            ValueError: If a required setting is missing or out of range
        """
        if not self.handler_path:
            raise ValueError("A handler script must be set (--handler or LIFECYCLED_HANDLER)")
        if not self.sns_topic and not self.enable_spot_listener:
            raise ValueError("At least one listener is required: set an SNS topic or enable spot")
        if self.heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be positive")
        if self.spot_poll_interval <= 0:
            raise ValueError("spot_poll_interval must be positive")


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
