"""WebSocket client wrapper for the Mattermost event socket."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    WebSocketException,
)

from ..errors import MattermostClientError, MattermostConnectionError
from ..protocol import parse_event
from .ws import connect_websocket

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class MattermostWsMessageType(Enum):
    """Normalized WebSocket message types."""

    TEXT = "text"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class MattermostWsMessage:
    """Normalized WebSocket message payload."""

    type: MattermostWsMessageType
    data: str | None = None


class MattermostWsClient:
    """Wrapper around the websockets library for the Mattermost event socket."""

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None

    @property
    def connected(self) -> bool:
        """Whether a connection has been opened."""
        return self._ws is not None

    async def connect(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        ping_interval: int | None = 20,
        timeout: float = 15.0,
    ) -> None:
        """Connect to the event socket."""
        self._ws = await connect_websocket(
            url,
            headers=headers,
            ping_interval=ping_interval,
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            await self._ws.close()

    async def send_text(self, text: str) -> None:
        """Send a text frame."""
        if self._ws is None:
            raise MattermostConnectionError("WebSocket is not connected")
        try:
            await self._ws.send(text)
        except ConnectionClosed as err:
            raise MattermostConnectionError("WebSocket is closed") from err

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Send a JSON payload as a text frame."""
        await self.send_text(json.dumps(payload))

    def __aiter__(self) -> AsyncIterator[MattermostWsMessage]:
        if self._ws is None:
            raise MattermostConnectionError("WebSocket is not connected")
        return self._iter_messages()

    async def _iter_messages(self) -> AsyncIterator[MattermostWsMessage]:
        """Yield text frames, then one CLOSED or ERROR message.

        The server ending the session normally yields CLOSED; an abnormal
        close or a socket failure yields ERROR carrying the reason.
        """
        if self._ws is None:
            raise MattermostConnectionError("WebSocket is not connected")

        try:
            async for frame in self._ws:
                # Mattermost only sends JSON text; binary frames are ignored.
                if isinstance(frame, str):
                    yield MattermostWsMessage(MattermostWsMessageType.TEXT, frame)
        except ConnectionClosedError as err:
            yield MattermostWsMessage(MattermostWsMessageType.ERROR, str(err))
        except ConnectionClosed:
            yield MattermostWsMessage(MattermostWsMessageType.CLOSED)
        except (OSError, WebSocketException) as err:
            yield MattermostWsMessage(MattermostWsMessageType.ERROR, str(err))
        else:
            yield MattermostWsMessage(MattermostWsMessageType.CLOSED)

    @staticmethod
    def decode_event(message: MattermostWsMessage) -> dict[str, Any] | None:
        """Decode a TEXT message into an event payload.

        Returns:
            The decoded object if it names an event, otherwise None (for
            example sequence replies to client actions).

        Raises:
            MattermostClientError: If message is not a TEXT message.
            ValueError: If the text is not JSON.
        """
        if message.type is not MattermostWsMessageType.TEXT or message.data is None:
            raise MattermostClientError("Only TEXT messages can be decoded")
        return parse_event(json.loads(message.data))
