#!/usr/bin/env python3
"""
Application layer for lifecycled.

Listeners that turn raw events into termination notices, and the logic that
handles a notice once one arrives.
"""

__version__ = "0.1.0"
__author__ = "John Ayers"


def file_info() -> dict[str, str]:
    """Return metadata about this module.

    Returns:
        Dictionary containing module metadata
    """
    return {
        "name": "application.__init__",
        "description": "Application layer initialization",
        "version": __version__,
        "author": __author__,
        "last_updated": "2026-10-16",
    }
