"""Tests for the command-line entry point."""

import pytest

from twitch_monitor import main as cli
from twitch_monitor.core.models import ChannelEntry


@pytest.fixture
def base_args(tmp_path):
    return [
        "--settings", str(tmp_path / "settings.json"),
        "--channels-file", str(tmp_path / "channels.json"),
    ]


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda verbose=False: None)
    monkeypatch.delenv("TWITCH_CLIENT_ID", raising=False)
    monkeypatch.delenv("TWITCH_ACCESS_TOKEN", raising=False)


def test_format_entry():
    assert cli.format_entry(ChannelEntry("alpha", is_live=True, auto_open=True)) == (
        "LIVE     alpha [auto-open]"
    )
    assert cli.format_entry(ChannelEntry("beta")) == "offline  beta"


def test_list_after_edits(base_args, capsys):
    code = cli.run(base_args + ["--add", "alpha", "--add", "beta", "--auto-open", "beta", "--list"])
    assert code == 0
    assert capsys.readouterr().out.splitlines() == [
        "offline  alpha",
        "offline  beta [auto-open]",
    ]


def test_remove_persists_across_runs(base_args, capsys):
    cli.run(base_args + ["--add", "alpha", "--add", "beta", "--list"])
    capsys.readouterr()
    cli.run(base_args + ["--remove", "alpha", "--list"])
    assert capsys.readouterr().out.splitlines() == ["offline  beta"]


def test_missing_credentials_is_fatal(base_args, monkeypatch):
    started = []
    monkeypatch.setattr(cli.ChannelMonitor, "start", lambda self: started.append(True))
    assert cli.run(base_args + ["--add", "alpha"]) == 1
    assert started == []


def test_auth_file_credentials(base_args, tmp_path, monkeypatch):
    auth = tmp_path / "auth.txt"
    auth.write_text("client_id = abc\noauth_token = xyz\n", encoding="utf-8")
    refreshed = []
    monkeypatch.setattr(cli.ChannelMonitor, "refresh", lambda self: refreshed.append(True))

    assert cli.run(base_args + ["--auth-file", str(auth), "--once"]) == 0
    assert refreshed == [True]
