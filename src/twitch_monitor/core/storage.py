"""JSON snapshot persistence for the channel list."""

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from .models import ChannelEntry

logger = logging.getLogger(__name__)


class ChannelStore:
    """
    Reads and writes the full channel list as a single JSON array.
    Every save overwrites the file with a complete snapshot.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[ChannelEntry]:
        """Load channels from disk.

        Never raises: a missing, unreadable or malformed file is treated as
        "no saved state" and an empty list is returned.
        """
        if not self.path.exists():
            logger.info(f"No saved channels at {self.path}, starting empty")
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Error loading channels from {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Error loading channels: expected a JSON array in {self.path}")
            return []

        entries: list[ChannelEntry] = []
        seen: set[str] = set()
        try:
            for item in data:
                entry = ChannelEntry.from_dict(item)
                if entry.name in seen:
                    logger.warning(f"Dropping duplicate channel '{entry.name}' from {self.path}")
                    continue
                seen.add(entry.name)
                entries.append(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error loading channels: malformed record in {self.path}: {e}")
            return []

        logger.debug(f"Loaded {len(entries)} channels from {self.path}")
        return entries

    def save(self, entries: Iterable[ChannelEntry]) -> bool:
        """Save channels to disk.

        Returns True on success. Failures are logged and reported through the
        return value only; the in-memory list stays authoritative.
        """
        try:
            payload = json.dumps([e.to_dict() for e in entries], indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving channels: {e}")
            return False

        # Atomic write: write to temp file then rename to prevent corruption on crash
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, suffix=".tmp", prefix="channels_"
            )
        except OSError as e:
            logger.error(f"Error saving channels: {e}")
            return False

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)  # Atomic on POSIX
        except OSError as e:
            logger.error(f"Error saving channels to {self.path}: {e}")
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            return False

        return True
