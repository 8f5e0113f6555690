"""Pytest configuration and fixtures for mattermost_realtime tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mattermost_realtime.transport.ws_client import (
    MattermostWsMessage,
    MattermostWsMessageType,
)

HOST = "https://chat.example.com/"
TEAM_NAME = "awesome-chat"
LOGIN_ID = "janedoe@example.com"
PASSWORD = "foobar123"
TOKEN = "session-token-1"

USER = {"id": "user1", "username": "janedoe"}
TEAM = {"id": "team1", "name": TEAM_NAME, "display_name": "Awesome Chat"}
CHANNELS = {
    "channels": [
        {"id": "chan1", "name": "town-square"},
        {"id": "chan2", "name": "off-topic"},
    ]
}


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    text_data: str | None = None,
    headers: dict[str, str] | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Data serialized into the text() body
        text_data: Raw text() body, used when json_data is None
        headers: Response headers

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status
    response.headers = headers or {}

    if json_data is not None:
        response.text.return_value = json.dumps(json_data)
    else:
        response.text.return_value = text_data if text_data is not None else ""

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


def route_requests(
    mock_session: MagicMock,
    *,
    get: dict[str, AsyncMock] | None = None,
    post: dict[str, AsyncMock] | None = None,
) -> None:
    """Answer session.get/post calls by URL suffix."""

    def _handler(routes: dict[str, AsyncMock]) -> Callable[..., AsyncMock]:
        def _side_effect(url: str, *args: Any, **kwargs: Any) -> AsyncMock:
            for suffix, response in routes.items():
                if url.endswith(suffix):
                    return response
            raise AssertionError(f"unexpected request to {url}")

        return _side_effect

    mock_session.get.side_effect = _handler(get or {})
    mock_session.post.side_effect = _handler(post or {})


def requested_urls(mock_method: MagicMock) -> list[str]:
    """URLs passed to a mocked session.get or session.post."""
    return [call.args[0] for call in mock_method.call_args_list]


@pytest.fixture
def mattermost_server(mock_session: MagicMock) -> MagicMock:
    """Mock session answering a successful login sequence."""
    route_requests(
        mock_session,
        get={
            "api/v3/users/initial_load": create_mock_response(
                json_data={"user": USER, "teams": [TEAM]}
            ),
            "api/v3/teams/team1/channels/": create_mock_response(json_data=CHANNELS),
        },
        post={
            "api/v3/users/login": create_mock_response(
                json_data=USER, headers={"Token": TOKEN}
            ),
            "api/v3/teams/team1/channels/chan1/posts/create": create_mock_response(
                json_data={"id": "post1"}
            ),
        },
    )
    return mock_session


class FakeWsClient:
    """Stand-in for MattermostWsClient fed from a queue."""

    def __init__(self) -> None:
        self.connect = AsyncMock()
        self.send_text = AsyncMock()
        self.closed = False
        self._queue: asyncio.Queue[MattermostWsMessage] = asyncio.Queue()

    def feed(self, payload: dict[str, Any] | str) -> None:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        self._queue.put_nowait(MattermostWsMessage(MattermostWsMessageType.TEXT, data))

    def feed_close(self) -> None:
        self._queue.put_nowait(MattermostWsMessage(MattermostWsMessageType.CLOSED))

    async def close(self) -> None:
        self.closed = True
        self.feed_close()

    def __aiter__(self) -> AsyncIterator[MattermostWsMessage]:
        return self._iter()

    async def _iter(self) -> AsyncIterator[MattermostWsMessage]:
        while True:
            msg = await self._queue.get()
            yield msg
            if msg.type is not MattermostWsMessageType.TEXT:
                return


@pytest.fixture
def fake_ws() -> FakeWsClient:
    """Create a fake event socket client."""
    return FakeWsClient()
