"""Core models and services for Twitch Monitor."""

from .models import ChannelEntry, StatusChanges
from .monitor import ChannelMonitor
from .poller import StatusPoller
from .registry import ChannelRegistry
from .settings import CredentialsError, Settings
from .storage import ChannelStore

__all__ = [
    "ChannelEntry",
    "StatusChanges",
    "ChannelMonitor",
    "StatusPoller",
    "ChannelRegistry",
    "ChannelStore",
    "CredentialsError",
    "Settings",
]
