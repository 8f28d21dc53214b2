"""Common utilities for urlsign."""

from urlsign.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
