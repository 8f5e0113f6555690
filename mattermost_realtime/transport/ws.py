"""WebSocket helpers for the Mattermost event socket."""

from __future__ import annotations

import asyncio

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from ..errors import (
    MattermostConnectionError,
    MattermostHandshakeError,
    MattermostTimeout,
)


async def connect_websocket(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    ping_interval: int | None = 20,
    timeout: float = 15.0,
) -> ClientConnection:
    """Connect to a WebSocket endpoint.

    Args:
        url: ws:// or wss:// URL
        headers: Extra handshake headers; User-Agent replaces the library default
        ping_interval: Interval for protocol-level ping frames
        timeout: Connection timeout
    """
    extra = dict(headers or {})
    user_agent = extra.pop("User-Agent", None)
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                additional_headers=extra,
                user_agent_header=user_agent,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise MattermostTimeout("WebSocket connection timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise MattermostHandshakeError(f"WebSocket handshake failed: {err}") from err
    except (OSError, WebSocketException) as err:
        raise MattermostConnectionError("WebSocket connection failed") from err
