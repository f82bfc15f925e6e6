"""Base API client interface."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence

import aiohttp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0  # seconds


class StatusApiError(Exception):
    """A status request failed or returned something unusable."""


async def safe_json(resp: aiohttp.ClientResponse) -> dict | list | None:
    """Safely parse JSON from response, returning None on error.

    This handles common error cases:
    - HTML error pages (ContentTypeError)
    - Malformed JSON (JSONDecodeError)
    - Bodies that are not valid UTF-8 (UnicodeDecodeError)
    - Empty responses

    Args:
        resp: aiohttp response object

    Returns:
        Parsed JSON data or None if parsing failed
    """
    try:
        return await resp.json()
    except (aiohttp.ContentTypeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse JSON response: {e}")
        return None


def chunked(items: Sequence[str], size: int) -> Iterator[list[str]]:
    """Split items into consecutive lists of at most size elements."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


class BaseStatusClient(ABC):
    """Abstract base class for live-status API clients."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the display name for this service."""
        ...

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            connector = aiohttp.TCPConnector(limit=10)
            self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            try:
                await self._session.close()
                # Allow time for underlying connections to fully close
                await asyncio.sleep(0.1)
            except RuntimeError as e:
                # Session may be attached to a loop that has already gone away
                if "attached to a different loop" in str(e):
                    logger.debug(f"Session attached to different loop, skipping close: {e}")
                else:
                    raise
            finally:
                self._session = None

    def reset_session(self) -> None:
        """Drop the HTTP session so it is recreated on the next request.

        Call before running requests in a new event loop.
        """
        self._session = None

    @abstractmethod
    async def get_live_channels(self, names: Sequence[str]) -> set[str]:
        """
        Get the subset of names that are currently live.
        Raises StatusApiError, aiohttp.ClientError or asyncio.TimeoutError
        if the status could not be determined for every name.
        """
        ...
