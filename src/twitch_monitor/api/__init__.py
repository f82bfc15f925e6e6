"""API clients for live-status lookups."""

from .base import BaseStatusClient, StatusApiError
from .twitch import TwitchApiClient

__all__ = [
    "BaseStatusClient",
    "StatusApiError",
    "TwitchApiClient",
]
