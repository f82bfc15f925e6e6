"""Channel monitoring service."""

import logging
from collections.abc import Callable

from ..api.base import BaseStatusClient
from ..api.twitch import TwitchApiClient
from .browser import open_in_browser
from .models import ChannelEntry, StatusChanges
from .poller import StatusPoller
from .registry import ChannelRegistry
from .settings import Settings
from .storage import ChannelStore

logger = logging.getLogger(__name__)


class ChannelMonitor:
    """
    Entry point for anything that displays or edits the channel list.
    Handles loading the saved list, write-through edits and the background poller.

    Every method returns as soon as the registry lock is released; none of
    them wait on network I/O.
    """

    def __init__(
        self,
        settings: Settings,
        store: ChannelStore | None = None,
        client: BaseStatusClient | None = None,
        opener: Callable[[str], object] = open_in_browser,
    ) -> None:
        self.settings = settings
        self._store = store or ChannelStore(settings.channels_path)
        self._registry = ChannelRegistry.from_store(self._store)
        self._opener = opener

        if client is None:
            client = TwitchApiClient(
                settings.twitch,
                timeout=settings.request_timeout,
                batch_size=settings.batch_size,
            )
        self._poller = StatusPoller(
            self._registry,
            client,
            opener=opener,
            interval=settings.poll_interval,
        )
        logger.info(f"Watching {len(self._registry)} channels from {self._store.path}")

    @property
    def is_running(self) -> bool:
        return self._poller.is_running

    def add_channel(self, name: str) -> ChannelEntry | None:
        """Add a channel to watch. Blank or duplicate names are ignored."""
        return self._registry.add(name)

    def remove_channel(self, name: str) -> bool:
        """Stop watching a channel. Returns True if anything was removed."""
        return self._registry.remove(name) > 0

    def set_auto_open_preference(self, name: str, value: bool) -> bool:
        """Set whether the channel opens in the browser when it goes live."""
        return self._registry.update_preference(name, value) > 0

    def current_snapshot(self) -> tuple[ChannelEntry, ...]:
        """Get a consistent copy of the channel list for display."""
        return self._registry.snapshot()

    def open_channel(self, name: str) -> bool:
        """Open a watched channel's page in the browser right away."""
        if name not in self._registry:
            return False
        url = ChannelEntry(name=name).watch_url
        try:
            self._opener(url)
        except Exception as e:
            logger.error(f"Failed to open {url}: {e}")
            return False
        return True

    def on_stream_online(self, callback: Callable[[ChannelEntry], None]) -> None:
        """Register a callback for when a channel goes live."""
        self._poller.on_stream_online(callback)

    def on_stream_offline(self, callback: Callable[[ChannelEntry], None]) -> None:
        """Register a callback for when a channel goes offline."""
        self._poller.on_stream_offline(callback)

    def on_cycle_complete(self, callback: Callable[[tuple[ChannelEntry, ...]], None]) -> None:
        """Register a callback for when a poll cycle has been applied."""
        self._poller.on_cycle_complete(callback)

    def start(self) -> None:
        """Start background polling."""
        self._poller.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop background polling."""
        self._poller.stop(timeout)

    def refresh(self) -> StatusChanges | None:
        """Run one poll cycle on the calling thread.

        Must not be called while the background poller is running.
        """
        if self.is_running:
            raise RuntimeError("Cannot refresh while the background poller is running")
        return self._poller.run_cycles(1)[0]
