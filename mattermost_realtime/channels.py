"""Channel name to identifier resolution."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .errors import ChannelNotFoundError
from .protocol import parse_channel_list

_LOGGER = logging.getLogger(__name__)


class ChannelResolver:
    """Cache of channel name to identifier for one team.

    A miss fetches the team's full channel list and caches every entry.
    Entries are never evicted, so a name the server does not know triggers a
    fresh fetch on every lookup until it appears.
    """

    def __init__(self, fetch_channels: Callable[[], Awaitable[Any]]) -> None:
        """Initialize resolver.

        Args:
            fetch_channels: Coroutine function returning the decoded channel
                list response for the current team.
        """
        self._fetch_channels = fetch_channels
        self._channels: dict[str, str] = {}
        self._lock = asyncio.Lock()

    @property
    def channels(self) -> dict[str, str]:
        """Copy of the cached name to identifier mapping."""
        return dict(self._channels)

    def __contains__(self, name: object) -> bool:
        return name in self._channels

    async def resolve(self, name: str) -> str:
        """Return the identifier of channel name.

        Raises:
            ChannelNotFoundError: If the team's channel list lacks name.
            ProtocolError: If the channel list response is malformed.
        """
        channel_id = self._channels.get(name)
        if channel_id is not None:
            return channel_id

        async with self._lock:
            # Another coroutine may have filled the cache while we waited.
            channel_id = self._channels.get(name)
            if channel_id is not None:
                return channel_id

            data = await self._fetch_channels()
            fetched = parse_channel_list(data)
            self._channels.update(fetched)
            _LOGGER.debug("Cached %d channels", len(fetched))

            if name not in self._channels:
                raise ChannelNotFoundError(name)
            return self._channels[name]
