#!/usr/bin/env python3
"""
EC2 instance metadata client (IMDSv2).

Used to discover the instance ID when it is not configured, and by the spot
listener to check for a scheduled spot termination.
"""

import logging
from datetime import datetime

import requests

from lifecycled.domain.lifecycle_message import parse_timestamp

__version__ = "0.1.0"
__author__ = "John Ayers"

logger = logging.getLogger(__name__)


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "instance_metadata",
        "description": "EC2 instance metadata client",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }


class InstanceMetadata:
    """Client for the EC2 instance metadata service using session tokens."""

    METADATA_BASE = "http://169.254.169.254/latest"
    TIMEOUT = 2
    TOKEN_TTL_SECONDS = 21600

    def __init__(
        self, base_url: str = METADATA_BASE, session: requests.Session | None = None
    ) -> None:
        """Initialize the metadata client.

        Args:
            base_url: Metadata service base URL
            session: Optional requests session
        """
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()

    def _get_token(self) -> str:
        response = self._session.put(
            f"{self.base_url}/api/token",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": str(self.TOKEN_TTL_SECONDS)},
            timeout=self.TIMEOUT,
        )
        response.raise_for_status()
        return response.text

    def get(self, path: str) -> str | None:
        """Fetch a metadata path.

        Args:
            path: Path below the base URL (e.g., meta-data/instance-id)

        Returns:
            Response body, or None if the path does not exist (404)

        Raises:
            requests.RequestException: If the metadata service cannot be reached
        """
        token = self._get_token()
        response = self._session.get(
            f"{self.base_url}/{path}",
            headers={"X-aws-ec2-metadata-token": token},
            timeout=self.TIMEOUT,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.text

    def get_instance_id(self) -> str:
        """Return the ID of the instance this process runs on.

        Raises:
            RuntimeError: If the instance ID cannot be retrieved
        """
        try:
            instance_id = self.get("meta-data/instance-id")
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to get instance ID from metadata: {e}") from e

        if not instance_id:
            raise RuntimeError("Instance metadata returned no instance ID")
        return instance_id

    def get_spot_termination_time(self) -> datetime | None:
        """Return the scheduled spot termination time, if any.

        Returns:
            Termination time, or None if no termination is scheduled

        Raises:
            requests.RequestException: If the metadata service cannot be reached
            ValueError: If the termination time cannot be parsed
        """
        value = self.get("meta-data/spot/termination-time")
        if value is None:
            return None
        return parse_timestamp(value.strip())


if __name__ == "__main__":
    # Example usage
    info = file_info()
    print(f"{info['name']} v{info['version']}")
