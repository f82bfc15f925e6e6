"""Twitch Helix API client."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from .base import DEFAULT_TIMEOUT, BaseStatusClient, StatusApiError, chunked, safe_json

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..core.settings import TwitchSettings

# Helix accepts at most 100 user_login parameters per request
MAX_BATCH_SIZE = 100


def parse_live_logins(data: Any) -> set[str]:
    """
    Extract the lowercase user_login of every stream in a Helix
    /streams response body.
    Raises StatusApiError if the body does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise StatusApiError("Response body is not a JSON object")

    streams = data.get("data")
    if not isinstance(streams, list):
        raise StatusApiError("Response has no 'data' list")

    logins: set[str] = set()
    for stream in streams:
        login = stream.get("user_login") if isinstance(stream, dict) else None
        if not isinstance(login, str):
            raise StatusApiError(f"Stream record without user_login: {stream!r}")
        logins.add(login.lower())
    return logins


def match_requested(names: Sequence[str], live_logins: set[str]) -> set[str]:
    """Map live logins back onto the names as they were requested."""
    return {name for name in names if name.lower() in live_logins}


class TwitchApiClient(BaseStatusClient):
    """Client for the Twitch Helix streams endpoint."""

    BASE_URL = "https://api.twitch.tv/helix"

    def __init__(
        self,
        settings: "TwitchSettings",
        timeout: float = DEFAULT_TIMEOUT,
        batch_size: int = MAX_BATCH_SIZE,
    ) -> None:
        super().__init__(timeout=timeout)
        self.settings = settings
        self.batch_size = min(batch_size, MAX_BATCH_SIZE)

    @property
    def name(self) -> str:
        return "Twitch"

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        return {
            "Client-ID": self.settings.client_id,
            "Authorization": f"Bearer {self.settings.access_token}",
        }

    async def _get_live_batch(self, logins: list[str]) -> set[str]:
        """Query one batch of logins. Returns the lowercase logins that are live."""
        params = [("user_login", login) for login in logins]
        # Helix defaults to 20 results per page
        params.append(("first", str(len(logins))))

        async with self.session.get(
            f"{self.BASE_URL}/streams",
            headers=self._get_headers(),
            params=params,
        ) as resp:
            if resp.status != 200:
                raise StatusApiError(f"{self.name} streams request failed: HTTP {resp.status}")
            data = await safe_json(resp)

        return parse_live_logins(data)

    async def get_live_channels(self, names: Sequence[str]) -> set[str]:
        """Get the live subset of names, querying in batches of batch_size."""
        if not names:
            return set()

        live_logins: set[str] = set()
        for batch in chunked(names, self.batch_size):
            live_logins |= await self._get_live_batch(batch)

        logger.debug(f"{self.name}: {len(live_logins)} of {len(names)} channels live")
        return match_requested(names, live_logins)
