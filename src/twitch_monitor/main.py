#!/usr/bin/env python3
"""Main entry point for Twitch Monitor."""

import argparse
import logging
import sys
import threading
from pathlib import Path

from .core.models import ChannelEntry
from .core.monitor import ChannelMonitor
from .core.settings import CredentialsError, Settings, read_auth_file

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("keyring").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twitch-monitor",
        description="Watch Twitch channels and open them in the browser when they go live.",
    )
    parser.add_argument("--settings", type=Path, help="Path to settings.json")
    parser.add_argument(
        "--auth-file", type=Path, help="File with 'client_id = ...' and 'oauth_token = ...' lines"
    )
    parser.add_argument("--channels-file", type=Path, help="Path to the saved channel list")
    parser.add_argument("--add", action="append", default=[], metavar="NAME")
    parser.add_argument("--remove", action="append", default=[], metavar="NAME")
    parser.add_argument(
        "--auto-open", action="append", default=[], metavar="NAME",
        help="Open NAME in the browser when it goes live",
    )
    parser.add_argument("--no-auto-open", action="append", default=[], metavar="NAME")
    parser.add_argument("--list", action="store_true", help="Print the channel list and exit")
    parser.add_argument("--once", action="store_true", help="Run a single status check and exit")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def format_entry(entry: ChannelEntry) -> str:
    """Format one channel as a line of the channel list."""
    status = "LIVE   " if entry.is_live else "offline"
    auto = " [auto-open]" if entry.auto_open else ""
    return f"{status}  {entry.name}{auto}"


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the settings file, auth file, environment and flags."""
    settings = Settings.load(args.settings)
    if args.auth_file:
        try:
            settings.merge_credentials(read_auth_file(args.auth_file))
        except OSError as e:
            logger.error(f"Could not read auth file {args.auth_file}: {e}")
    settings.apply_env()
    if args.channels_file:
        settings.channels_file = str(args.channels_file)
    return settings


def apply_edits(monitor: ChannelMonitor, args: argparse.Namespace) -> None:
    for name in args.add:
        monitor.add_channel(name)
    for name in args.remove:
        if not monitor.remove_channel(name):
            logger.warning(f"Channel '{name}' is not in the list")
    for names, value in ((args.auto_open, True), (args.no_auto_open, False)):
        for name in names:
            if not monitor.set_auto_open_preference(name, value):
                logger.warning(f"Channel '{name}' is not in the list")


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    settings = load_settings(args)
    monitor = ChannelMonitor(settings)
    apply_edits(monitor, args)

    if args.list:
        for entry in monitor.current_snapshot():
            print(format_entry(entry))
        return 0

    try:
        settings.require_credentials()
    except CredentialsError as e:
        logger.error(f"{e}. Set them in settings.json, an --auth-file, or the "
                     "TWITCH_CLIENT_ID / TWITCH_ACCESS_TOKEN environment variables.")
        return 1

    monitor.on_stream_online(lambda entry: logger.info(f"{entry.name} is now live"))
    monitor.on_stream_offline(lambda entry: logger.info(f"{entry.name} went offline"))

    if args.once:
        monitor.refresh()
        for entry in monitor.current_snapshot():
            print(format_entry(entry))
        return 0

    monitor.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        monitor.stop()
    return 0


def main() -> int:
    """Main entry point."""
    return run()


if __name__ == "__main__":
    sys.exit(main())
