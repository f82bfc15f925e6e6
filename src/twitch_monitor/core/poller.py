"""Background status polling."""

import asyncio
import logging
import threading
from collections.abc import Callable

import aiohttp

from ..api.base import BaseStatusClient, StatusApiError
from .models import ChannelEntry, StatusChanges
from .registry import ChannelRegistry

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0  # seconds

# Failures that discard a cycle without touching the registry
CYCLE_ERRORS = (StatusApiError, aiohttp.ClientError, asyncio.TimeoutError)


class StatusPoller:
    """
    Periodically reconciles remote live status into the registry.

    The poller runs on its own daemon thread with a private event loop. Only
    reading the channel names and applying the result take the registry lock;
    the HTTP request runs outside it.
    """

    def __init__(
        self,
        registry: ChannelRegistry,
        client: BaseStatusClient,
        opener: Callable[[str], object],
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.registry = registry
        self.client = client
        self.opener = opener
        self.interval = interval

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        self._on_stream_online: list[Callable[[ChannelEntry], None]] = []
        self._on_stream_offline: list[Callable[[ChannelEntry], None]] = []
        self._on_cycle_complete: list[Callable[[tuple[ChannelEntry, ...]], None]] = []

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def on_stream_online(self, callback: Callable[[ChannelEntry], None]) -> None:
        """Register a callback for when a channel goes live."""
        self._on_stream_online.append(callback)

    def on_stream_offline(self, callback: Callable[[ChannelEntry], None]) -> None:
        """Register a callback for when a channel goes offline."""
        self._on_stream_offline.append(callback)

    def on_cycle_complete(self, callback: Callable[[tuple[ChannelEntry, ...]], None]) -> None:
        """Register a callback run with a fresh snapshot after each applied cycle."""
        self._on_cycle_complete.append(callback)

    async def poll_once(self) -> StatusChanges | None:
        """
        Run a single poll cycle.
        Returns the applied changes, or None if the cycle was skipped or failed.
        """
        names = self.registry.names()
        if not names:
            return None

        try:
            live = await self.client.get_live_channels(names)
        except CYCLE_ERRORS as e:
            logger.warning(f"{self.client.name} status check failed, skipping cycle: {e!r}")
            return None

        changes = self.registry.apply_status_update(live)

        for entry in changes.to_open:
            self._open(entry)

        self._fire_events(changes)
        return changes

    def _open(self, entry: ChannelEntry) -> None:
        logger.info(f"'{entry.name}' went live, opening {entry.watch_url}")
        try:
            self.opener(entry.watch_url)
        except Exception as e:
            logger.error(f"Failed to open {entry.watch_url}: {e}")

    def _fire_events(self, changes: StatusChanges) -> None:
        for entry in changes.went_live:
            for callback in self._on_stream_online:
                try:
                    callback(entry)
                except Exception as e:
                    logger.error(f"Stream online callback error: {e}")

        for entry in changes.went_offline:
            for callback in self._on_stream_offline:
                try:
                    callback(entry)
                except Exception as e:
                    logger.error(f"Stream offline callback error: {e}")

        if self._on_cycle_complete:
            snapshot = self.registry.snapshot()
            for callback in self._on_cycle_complete:
                try:
                    callback(snapshot)
                except Exception as e:
                    logger.error(f"Cycle callback error: {e}")

    def run_cycles(self, count: int) -> list[StatusChanges | None]:
        """Run count cycles back to back on the calling thread, then close the session."""
        results: list[StatusChanges | None] = []
        loop = asyncio.new_event_loop()
        try:
            self.client.reset_session()
            for _ in range(count):
                results.append(loop.run_until_complete(self.poll_once()))
        finally:
            try:
                loop.run_until_complete(self.client.close())
            finally:
                self.client.reset_session()
                loop.close()
        return results

    def start(self) -> None:
        """Start the polling thread. Does nothing if already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="StatusPoller", daemon=True)
        self._thread.start()
        logger.info(f"Status poller started (interval={self.interval}s)")

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the polling thread to stop and wait for it."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Status poller did not stop within timeout")
                return
        self._thread = None
        logger.info("Status poller stopped")

    def _run(self) -> None:
        """Thread body: poll, then wait for the interval or a stop signal."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self.client.reset_session()
        try:
            while not self._stop_event.is_set():
                try:
                    loop.run_until_complete(self.poll_once())
                except Exception as e:
                    logger.exception(f"Unexpected error in poll cycle: {e}")
                self._stop_event.wait(self.interval)

            loop.run_until_complete(self.client.close())
        finally:
            self.client.reset_session()
            loop.close()
