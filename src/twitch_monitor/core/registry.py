"""Thread-safe ordered registry of watched channels."""

import logging
import threading
from collections.abc import Iterable
from dataclasses import replace

from .models import ChannelEntry, StatusChanges
from .storage import ChannelStore

logger = logging.getLogger(__name__)


class ChannelRegistry:
    """
    Ordered list of channel entries shared between the UI and the poller.

    All reads and writes happen under a single lock, and every mutation is
    written through to the store before the lock is released.
    """

    def __init__(self, store: ChannelStore, entries: Iterable[ChannelEntry] = ()) -> None:
        self._store = store
        self._entries: list[ChannelEntry] = list(entries)
        self._lock = threading.RLock()

    @classmethod
    def from_store(cls, store: ChannelStore) -> "ChannelRegistry":
        """Create a registry populated from the store's saved state."""
        return cls(store, store.load())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return any(e.name == name for e in self._entries)

    def snapshot(self) -> tuple[ChannelEntry, ...]:
        """Get copies of all entries in insertion order."""
        with self._lock:
            return tuple(replace(e) for e in self._entries)

    def names(self) -> list[str]:
        """Get the names of all entries in insertion order."""
        with self._lock:
            return [e.name for e in self._entries]

    def add(self, name: str) -> ChannelEntry | None:
        """
        Add a channel to the end of the list.
        Returns a copy of the new entry, or None if the name is blank or
        already present.
        """
        name = name.strip()
        if not name:
            return None

        with self._lock:
            if any(e.name == name for e in self._entries):
                logger.info(f"Channel '{name}' is already being watched")
                return None

            entry = ChannelEntry(name=name)
            self._entries.append(entry)
            self._persist()
            logger.info(f"Added channel '{name}'")
            return replace(entry)

    def remove(self, name: str) -> int:
        """Remove every entry with this name. Returns how many were removed."""
        with self._lock:
            kept = [e for e in self._entries if e.name != name]
            removed = len(self._entries) - len(kept)
            if removed:
                self._entries = kept
                self._persist()
                logger.info(f"Removed channel '{name}'")
            return removed

    def update_preference(self, name: str, value: bool) -> int:
        """Set the auto-open preference for matching entries. Returns the match count."""
        with self._lock:
            matched = 0
            for entry in self._entries:
                if entry.name == name:
                    entry.auto_open = value
                    matched += 1
            if matched:
                self._persist()
            return matched

    def apply_status_update(self, live_names: Iterable[str]) -> StatusChanges:
        """
        Reconcile the live set into every entry in one pass.

        Entries absent from live_names are marked offline. An entry that goes
        live with auto-open enabled is flagged as opened and returned in
        StatusChanges.to_open; the caller performs the actual open. An entry
        seen offline has its opened flag cleared so the next go-live opens
        again.
        """
        live = frozenset(live_names)
        changes = StatusChanges()

        with self._lock:
            for entry in self._entries:
                was_live = entry.is_live
                entry.is_live = entry.name in live

                if entry.is_live and not was_live:
                    changes.went_live.append(replace(entry))
                    if entry.auto_open and not entry.opened_in_browser:
                        entry.opened_in_browser = True
                        changes.to_open.append(replace(entry))
                elif was_live and not entry.is_live:
                    changes.went_offline.append(replace(entry))

                if not entry.is_live:
                    entry.opened_in_browser = False

            self._persist()

        return changes

    def _persist(self) -> None:
        """Write the current list through to the store. Caller holds the lock."""
        if not self._store.save(self._entries):
            logger.warning("Channel list not saved; in-memory state is still current")
