"""Tests for ChannelRegistry."""

import json
import threading

from twitch_monitor.core.models import ChannelEntry
from twitch_monitor.core.registry import ChannelRegistry


def _saved(channels_path):
    return json.loads(channels_path.read_text(encoding="utf-8"))


# --- add / remove ---


def test_add_appends_in_order(registry):
    for name in ("c", "a", "b"):
        registry.add(name)
    assert [e.name for e in registry.snapshot()] == ["c", "a", "b"]


def test_add_trims_name(registry):
    entry = registry.add("  alpha \n")
    assert entry.name == "alpha"
    assert registry.names() == ["alpha"]


def test_add_blank_is_noop(registry, channels_path):
    assert registry.add("") is None
    assert registry.add("   \t") is None
    assert len(registry) == 0
    assert not channels_path.exists()


def test_add_duplicate_is_rejected(registry):
    registry.add("alpha")
    assert registry.add(" alpha ") is None
    assert registry.names() == ["alpha"]


def test_add_is_case_sensitive(registry):
    registry.add("alpha")
    assert registry.add("Alpha") is not None
    assert registry.names() == ["alpha", "Alpha"]


def test_add_writes_through(registry, channels_path):
    registry.add("alpha")
    assert _saved(channels_path) == [
        {"name": "alpha", "status": False, "open_in_browser": False, "opened_in_browser": False}
    ]


def test_remove_keeps_order_of_survivors(registry):
    for name in ("a", "b", "c", "d"):
        registry.add(name)
    registry.remove("b")
    registry.remove("d")
    registry.add("e")
    assert registry.names() == ["a", "c", "e"]


def test_remove_all_matching_entries(store):
    registry = ChannelRegistry(store, [ChannelEntry("a"), ChannelEntry("b"), ChannelEntry("a")])
    assert registry.remove("a") == 2
    assert registry.names() == ["b"]


def test_remove_missing_is_noop(registry, channels_path):
    registry.add("alpha")
    before = channels_path.read_bytes()
    assert registry.remove("beta") == 0
    assert channels_path.read_bytes() == before


def test_remove_writes_through(registry, channels_path):
    registry.add("alpha")
    registry.add("beta")
    registry.remove("alpha")
    assert [c["name"] for c in _saved(channels_path)] == ["beta"]


def test_contains(registry):
    registry.add("alpha")
    assert "alpha" in registry
    assert "beta" not in registry


# --- snapshot ---


def test_snapshot_is_a_copy(registry):
    registry.add("alpha")
    snap = registry.snapshot()
    snap[0].is_live = True
    snap[0].auto_open = True
    assert registry.snapshot()[0] == ChannelEntry("alpha")


def test_snapshot_unaffected_by_later_mutation(registry):
    registry.add("alpha")
    snap = registry.snapshot()
    registry.add("beta")
    registry.apply_status_update({"alpha"})
    assert len(snap) == 1
    assert snap[0].is_live is False


# --- update_preference ---


def test_update_preference(registry, channels_path):
    registry.add("alpha")
    assert registry.update_preference("alpha", True) == 1
    assert registry.snapshot()[0].auto_open is True
    assert _saved(channels_path)[0]["open_in_browser"] is True


def test_update_preference_missing(registry):
    assert registry.update_preference("nobody", True) == 0


# --- apply_status_update ---


def test_apply_sets_live_and_leaves_others(registry):
    registry.add("alpha")
    registry.add("beta")
    registry.update_preference("beta", True)
    registry.apply_status_update({"alpha"})
    alpha, beta = registry.snapshot()
    assert alpha.is_live is True
    assert beta == ChannelEntry("beta", auto_open=True)


def test_apply_ignores_unknown_names(registry):
    registry.add("alpha")
    changes = registry.apply_status_update({"zeta"})
    assert registry.snapshot()[0].is_live is False
    assert not changes.changed


def test_apply_marks_missing_names_offline(store):
    registry = ChannelRegistry(store, [ChannelEntry("alpha", is_live=True)])
    changes = registry.apply_status_update(set())
    assert registry.snapshot()[0].is_live is False
    assert [e.name for e in changes.went_offline] == ["alpha"]


def test_apply_persists(registry, channels_path):
    registry.add("alpha")
    registry.apply_status_update({"alpha"})
    assert _saved(channels_path)[0]["status"] is True


def test_go_live_with_auto_open_is_flagged_once(store, alpha_entry):
    registry = ChannelRegistry(store, [alpha_entry])

    first = registry.apply_status_update({"alpha"})
    assert [e.name for e in first.to_open] == ["alpha"]
    assert registry.snapshot()[0].opened_in_browser is True

    second = registry.apply_status_update({"alpha"})
    assert second.to_open == []
    assert second.went_live == []
    assert registry.snapshot()[0].opened_in_browser is True


def test_go_live_without_auto_open_is_not_flagged(registry):
    registry.add("alpha")
    changes = registry.apply_status_update({"alpha"})
    assert [e.name for e in changes.went_live] == ["alpha"]
    assert changes.to_open == []
    assert registry.snapshot()[0].opened_in_browser is False


def test_offline_resets_opened_flag(store, alpha_entry):
    registry = ChannelRegistry(store, [alpha_entry])
    registry.apply_status_update({"alpha"})
    registry.apply_status_update(set())
    assert registry.snapshot()[0].opened_in_browser is False

    changes = registry.apply_status_update({"alpha"})
    assert [e.name for e in changes.to_open] == ["alpha"]


def test_already_opened_flag_suppresses_open(store):
    entry = ChannelEntry("alpha", is_live=False, auto_open=True, opened_in_browser=True)
    registry = ChannelRegistry(store, [entry])
    # A stale flag only clears once the channel is seen offline
    assert registry.apply_status_update({"alpha"}).to_open == []


# --- concurrency ---


def test_concurrent_adds_and_snapshots(registry):
    errors = []

    def writer(prefix):
        for i in range(50):
            registry.add(f"{prefix}{i}")

    def reader():
        for _ in range(100):
            snap = registry.snapshot()
            names = [e.name for e in snap]
            if len(names) != len(set(names)):
                errors.append(names)

    threads = [threading.Thread(target=writer, args=(p,)) for p in "ab"]
    threads.append(threading.Thread(target=reader))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(registry) == 100
    assert [n for n in registry.names() if n.startswith("a")] == [f"a{i}" for i in range(50)]
