"""Shared test fixtures for twitch_monitor tests."""

from collections.abc import Sequence

import pytest

from twitch_monitor.api.base import BaseStatusClient, StatusApiError
from twitch_monitor.core import credential_store
from twitch_monitor.core.models import ChannelEntry
from twitch_monitor.core.registry import ChannelRegistry
from twitch_monitor.core.storage import ChannelStore


class FakeStatusClient(BaseStatusClient):
    """In-memory status client: reports whatever is in `live`."""

    def __init__(self, live: Sequence[str] = ()) -> None:
        super().__init__()
        self.live = set(live)
        self.fail = False
        self.calls: list[list[str]] = []

    @property
    def name(self) -> str:
        return "Fake"

    async def get_live_channels(self, names):
        self.calls.append(list(names))
        if self.fail:
            raise StatusApiError("simulated failure")
        return {n for n in names if n in self.live}


class RecordingOpener:
    def __init__(self) -> None:
        self.urls: list[str] = []

    def __call__(self, url: str) -> bool:
        self.urls.append(url)
        return True


@pytest.fixture(autouse=True)
def no_keyring(monkeypatch):
    """Keep tests away from the real system keyring."""
    monkeypatch.setattr(credential_store, "_available", False)


@pytest.fixture
def channels_path(tmp_path):
    return tmp_path / "channels.json"


@pytest.fixture
def store(channels_path):
    return ChannelStore(channels_path)


@pytest.fixture
def registry(store):
    return ChannelRegistry(store)


@pytest.fixture
def fake_client():
    return FakeStatusClient()


@pytest.fixture
def opener():
    return RecordingOpener()


@pytest.fixture
def alpha_entry():
    return ChannelEntry(name="alpha", is_live=False, auto_open=True, opened_in_browser=False)
