"""Core data models for Twitch Monitor."""

from dataclasses import dataclass, field
from typing import Any

WATCH_URL = "https://www.twitch.tv/{name}"


@dataclass
class ChannelEntry:
    """Represents a watched channel and its last known status."""

    name: str
    is_live: bool = False
    auto_open: bool = False
    opened_in_browser: bool = False  # Reset whenever the channel is seen offline

    @property
    def watch_url(self) -> str:
        """Get the watch page URL for this channel."""
        return WATCH_URL.format(name=self.name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON object."""
        return {
            "name": self.name,
            "status": self.is_live,
            "open_in_browser": self.auto_open,
            "opened_in_browser": self.opened_in_browser,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChannelEntry":
        """
        Create an entry from a persisted JSON object.
        Raises KeyError, TypeError or ValueError if the record is malformed.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected object, got {type(data).__name__}")

        name = data["name"]
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Invalid channel name: {name!r}")

        # Older files used "isLive" for the status flag
        is_live = data.get("status", data.get("isLive", False))

        return cls(
            name=name.strip(),
            is_live=_as_bool(is_live, "status"),
            auto_open=_as_bool(data.get("open_in_browser", False), "open_in_browser"),
            opened_in_browser=_as_bool(data.get("opened_in_browser", False), "opened_in_browser"),
        )


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"Field '{key}' must be a boolean, got {type(value).__name__}")
    return value


@dataclass
class StatusChanges:
    """Transitions observed while applying one status update."""

    went_live: list[ChannelEntry] = field(default_factory=list)
    went_offline: list[ChannelEntry] = field(default_factory=list)
    to_open: list[ChannelEntry] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.went_live or self.went_offline)
