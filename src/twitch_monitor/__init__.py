"""Twitch Monitor: watch Twitch channels and open them when they go live."""

__version__ = "0.1.0"
