#!/usr/bin/env python3
"""
lifecycled: run a handler when an EC2 instance is about to be terminated.

Listens for autoscaling lifecycle hook events (via SNS and SQS) and spot
interruption notices, runs an operator-supplied handler, keeps the lifecycle
action alive with heartbeats and completes it once the handler returns.
"""

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "__init__",
        "description": "Package initialization for lifecycled",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }
