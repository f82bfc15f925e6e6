"""Settings management for Twitch Monitor."""

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from appdirs import user_config_dir, user_data_dir

from . import credential_store

logger = logging.getLogger(__name__)

APP_NAME = "twitch-monitor"
APP_AUTHOR = "twitch-monitor"

DEFAULT_POLL_INTERVAL = 30
DEFAULT_REQUEST_TIMEOUT = 10.0
# Helix accepts at most 100 user_login parameters per request
DEFAULT_BATCH_SIZE = 100

ENV_CLIENT_ID = "TWITCH_CLIENT_ID"
ENV_ACCESS_TOKEN = "TWITCH_ACCESS_TOKEN"


class CredentialsError(Exception):
    """Raised when the Twitch client ID or access token is missing."""


def get_config_dir() -> Path:
    """Get the configuration directory."""
    path = Path(user_config_dir(APP_NAME, APP_AUTHOR))
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Get the data directory."""
    path = Path(user_data_dir(APP_NAME, APP_AUTHOR))
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class TwitchSettings:
    """Twitch API credentials."""

    client_id: str = ""
    access_token: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.client_id and self.access_token)


def read_auth_file(path: Path) -> TwitchSettings:
    """
    Read credentials from a plain auth file of the form:

        client_id = abc123
        oauth_token = xyz789

    Raises OSError if the file cannot be read.
    """
    creds = TwitchSettings()
    with open(path, encoding="utf-8") as f:
        for line in f:
            key, sep, value = line.strip().partition("=")
            if not sep:
                continue
            key = key.strip()
            if key == "client_id":
                creds.client_id = value.strip()
            elif key == "oauth_token":
                creds.access_token = value.strip()
    return creds


@dataclass
class Settings:
    """Application settings."""

    poll_interval: int = DEFAULT_POLL_INTERVAL  # seconds
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT  # seconds, per request
    batch_size: int = DEFAULT_BATCH_SIZE
    channels_file: str = ""  # empty = channels.json in the data directory

    twitch: TwitchSettings = field(default_factory=TwitchSettings)

    @property
    def channels_path(self) -> Path:
        """Get the path of the persisted channel list."""
        if self.channels_file:
            return Path(self.channels_file).expanduser()
        return get_data_dir() / "channels.json"

    def apply_env(self, environ: Mapping[str, str] | None = None) -> None:
        """Override credentials from TWITCH_CLIENT_ID / TWITCH_ACCESS_TOKEN."""
        if environ is None:
            environ = os.environ
        if environ.get(ENV_CLIENT_ID):
            self.twitch.client_id = environ[ENV_CLIENT_ID].strip()
        if environ.get(ENV_ACCESS_TOKEN):
            self.twitch.access_token = environ[ENV_ACCESS_TOKEN].strip()

    def merge_credentials(self, creds: TwitchSettings) -> None:
        """Take any non-empty values from creds."""
        if creds.client_id:
            self.twitch.client_id = creds.client_id
        if creds.access_token:
            self.twitch.access_token = creds.access_token

    def require_credentials(self) -> None:
        """Raise CredentialsError unless both client ID and token are set."""
        missing = []
        if not self.twitch.client_id:
            missing.append("client ID")
        if not self.twitch.access_token:
            missing.append("access token")
        if missing:
            raise CredentialsError(f"Missing Twitch {' and '.join(missing)}")

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from file. Never raises; problems fall back to defaults."""
        if path is None:
            path = get_config_dir() / "settings.json"

        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            settings = cls._from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error loading settings from {path}: {e}")
            return cls()

        # Keyring token overrides the JSON value
        kr_token = credential_store.load_access_token()
        if kr_token:
            settings.twitch.access_token = kr_token
        elif settings.twitch.access_token and credential_store.keyring_available():
            # Move a plaintext token into the keyring and out of the file
            try:
                settings.save(path)
            except OSError as e:
                logger.error(f"Could not rewrite {path} after moving token to keyring: {e}")

        return settings

    def save(self, path: Path | None = None) -> None:
        """Save settings to file."""
        if path is None:
            path = get_config_dir() / "settings.json"

        path.parent.mkdir(parents=True, exist_ok=True)

        in_keyring = credential_store.save_access_token(self.twitch.access_token)

        # Atomic write: write to temp file then rename to prevent corruption on crash
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix="settings_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._to_dict(exclude_secrets=in_keyring), f, indent=2)
            os.replace(tmp_path, path)  # Atomic on POSIX
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

        if not in_keyring:
            credential_store.restrict_to_owner(str(path))

    @staticmethod
    def _validate_int(value, default: int, min_val: int = 0, max_val: int | None = None) -> int:
        """Validate and constrain an integer value."""
        if not isinstance(value, int) or isinstance(value, bool):
            return default
        if value < min_val:
            return min_val
        if max_val is not None and value > max_val:
            return max_val
        return value

    @staticmethod
    def _validate_float(value, default: float, min_val: float, max_val: float) -> float:
        """Validate and constrain a numeric value."""
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return default
        return float(min(max(value, min_val), max_val))

    @classmethod
    def _from_dict(cls, data: dict) -> "Settings":
        """Create Settings from a dictionary with validation."""
        settings = cls()

        settings.poll_interval = cls._validate_int(
            data.get("poll_interval"), DEFAULT_POLL_INTERVAL, min_val=5, max_val=3600
        )
        settings.request_timeout = cls._validate_float(
            data.get("request_timeout"), DEFAULT_REQUEST_TIMEOUT, min_val=1.0, max_val=120.0
        )
        settings.batch_size = cls._validate_int(
            data.get("batch_size"), DEFAULT_BATCH_SIZE, min_val=1, max_val=DEFAULT_BATCH_SIZE
        )
        channels_file = data.get("channels_file", "")
        if isinstance(channels_file, str):
            settings.channels_file = channels_file

        twitch = data.get("twitch", {})
        if isinstance(twitch, dict):
            settings.twitch = TwitchSettings(
                client_id=str(twitch.get("client_id", "")),
                access_token=str(twitch.get("access_token", "")),
            )

        return settings

    def _to_dict(self, exclude_secrets: bool = False) -> dict:
        """Convert settings to a dictionary."""
        return {
            "poll_interval": self.poll_interval,
            "request_timeout": self.request_timeout,
            "batch_size": self.batch_size,
            "channels_file": self.channels_file,
            "twitch": {
                "client_id": self.twitch.client_id,
                "access_token": "" if exclude_secrets else self.twitch.access_token,
            },
        }
