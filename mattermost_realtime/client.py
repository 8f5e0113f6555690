"""Session manager for the Mattermost web service and event socket.

This module provides the public client API. It handles:
- Login and session token propagation
- Initial load of user and team identity
- Upgrade to the persistent event socket
- Routing inbound events to registered callbacks
- Posting messages to named channels
- Keepalive pings
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from .channels import ChannelResolver
from .errors import (
    AuthenticationError,
    ConfigurationError,
    InvalidArgumentError,
    MattermostClientError,
    MattermostResponseError,
    NotStartedError,
)
from .events import EventCallback, EventDispatcher
from .protocol import (
    DEFAULT_USER_AGENT,
    INITIAL_LOAD_PATH,
    LOGIN_PATH,
    build_headers,
    build_login_body,
    build_post_payload,
    channels_path,
    create_post_path,
    normalize_host,
    parse_initial_load,
    websocket_url,
)
from .transport.http import ApiResponse, MattermostHttpClient
from .transport.ws_client import (
    MattermostWsClient,
    MattermostWsMessage,
    MattermostWsMessageType,
)

_LOGGER = logging.getLogger(__name__)

PING_FRAME = "ping"


@dataclass(frozen=True)
class Credentials:
    """Server address and login details."""

    host: str
    team: str
    login_id: str
    password: str = field(repr=False)


@dataclass
class SessionState:
    """Mutable state of a logged-in session."""

    token: str | None = None
    user: dict[str, Any] | None = None
    team: dict[str, Any] | None = None


def _is_non_empty(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


class MattermostClient:
    """Client for a single Mattermost user session.

    Usage:
        client = MattermostClient("chat.example.com", "awesome-chat",
                                  "janedoe@example.com", "foobar123")
        client.on("posted", my_posted_handler)
        await client.start()
        await client.send({"channel": "town-square", "message": "hi"})
        await client.close()
    """

    def __init__(
        self,
        host: str,
        team: str,
        login_id: str,
        password: str,
        *,
        session: aiohttp.ClientSession | None = None,
        request_timeout: float = 10.0,
        connect_timeout: float = 15.0,
        ping_interval: int | None = 20,
        keepalive_interval: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize client. No network I/O happens until start().

        Args:
            host: Server address, with or without scheme
            team: Team name
            login_id: Login email
            password: Login password
            session: aiohttp session to use; one is created and owned if omitted
            request_timeout: Per-request HTTP timeout (seconds)
            connect_timeout: Event socket connection timeout (seconds)
            ping_interval: WebSocket protocol ping interval (seconds)
            keepalive_interval: Interval for "ping" frames (seconds), or None
                to leave keepalive to the caller
            user_agent: User-Agent header value
        """
        if not _is_non_empty(host):
            raise ConfigurationError("must provide a Mattermost server address")
        if not _is_non_empty(team):
            raise ConfigurationError("must provide a Mattermost team name")
        if not _is_non_empty(login_id) or not _is_non_empty(password):
            raise ConfigurationError("must provide a login email and password")

        self._credentials = Credentials(
            host=normalize_host(host),
            team=team,
            login_id=login_id,
            password=password,
        )
        self._state = SessionState()

        self._request_timeout = request_timeout
        self._connect_timeout = connect_timeout
        self._ping_interval = ping_interval
        self._keepalive_interval = keepalive_interval
        self._user_agent = user_agent

        # HTTP
        self._session = session
        self._owns_session = session is None
        self._http: MattermostHttpClient | None = None

        # Event socket
        self._ws: MattermostWsClient | None = None
        self._started = False
        self._start_lock = asyncio.Lock()
        self._listen_task: asyncio.Task[None] | None = None
        self._keepalive_task: asyncio.Task[None] | None = None

        self._channels = ChannelResolver(self._fetch_channels)
        self._events = EventDispatcher()

    async def __aenter__(self) -> MattermostClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Public API: State
    # -------------------------------------------------------------------------

    @property
    def credentials(self) -> Credentials:
        """Normalized credentials."""
        return self._credentials

    @property
    def started(self) -> bool:
        """Whether start() has completed the socket upgrade."""
        return self._started

    @property
    def token(self) -> str | None:
        """Current session token."""
        return self._state.token

    @property
    def user(self) -> dict[str, Any] | None:
        """User object from initial load."""
        return self._state.user

    @property
    def team(self) -> dict[str, Any] | None:
        """Configured team object from initial load."""
        return self._state.team

    def headers(self) -> dict[str, str]:
        """Request headers for the current session state."""
        return build_headers(self._state.token, user_agent=self._user_agent)

    # -------------------------------------------------------------------------
    # Public API: Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Log in, load user and team identity, and open the event socket.

        Raises:
            AuthenticationError: If login returns no session token
            ProtocolError: If initial_load lacks the user or configured team
            MattermostClientError: On transport failures, or if already started
        """
        # Overlapping calls wait here and then see the first call's outcome.
        async with self._start_lock:
            if self._started:
                raise MattermostClientError("client is already started")
            await self._start()

    async def _start(self) -> None:
        team_name = self._credentials.team
        _LOGGER.info(
            "[%s] Logging in to %s as %s",
            team_name,
            self._credentials.host,
            self._credentials.login_id,
        )
        await self._login()

        response = await self._get(INITIAL_LOAD_PATH)
        user, team = parse_initial_load(response.data, team_name)
        self._state.user = user
        self._state.team = team
        _LOGGER.debug("[%s] Initial load complete (user %s)", team_name, user["id"])

        url = websocket_url(self._credentials.host)
        ws_client = MattermostWsClient()
        await ws_client.connect(
            url,
            headers=self.headers(),
            ping_interval=self._ping_interval,
            timeout=self._connect_timeout,
        )
        self._ws = ws_client
        self._started = True
        _LOGGER.info("[%s] Connected to %s", team_name, url)

        self._listen_task = asyncio.create_task(self._listen())
        if self._keepalive_interval:
            self._keepalive_task = asyncio.create_task(self._keepalive_loop())

    async def close(self) -> None:
        """Stop background tasks, close the socket and any owned HTTP session."""
        _LOGGER.info("[%s] Closing client", self._credentials.team)

        for task in (self._keepalive_task, self._listen_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._keepalive_task = None
        self._listen_task = None

        if self._ws is not None:
            try:
                await asyncio.wait_for(self._ws.close(), timeout=2.0)
            except TimeoutError:
                _LOGGER.warning(
                    "[%s] WebSocket close timed out", self._credentials.team
                )
            self._ws = None
        self._started = False

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._http = None

    # -------------------------------------------------------------------------
    # Public API: Events
    # -------------------------------------------------------------------------

    def on(self, event: str, callback: EventCallback) -> None:
        """Register callback for event, replacing any previous one.

        Callback receives (client, payload) where payload is the decoded
        event, e.g. {"event": "posted", "data": {...}}.
        """
        self._events.on(event, callback)

    def off(self, event: str) -> None:
        """Remove the callback registered for event."""
        self._events.off(event)

    # -------------------------------------------------------------------------
    # Public API: Messaging
    # -------------------------------------------------------------------------

    async def send(self, data: Mapping[str, Any]) -> Any:
        """Post a message to a channel.

        Args:
            data: {"channel": channel name, "message": text}

        Returns:
            Decoded post creation response.

        Raises:
            InvalidArgumentError: If channel or message is missing or empty
            NotStartedError: If start() has not completed
            ChannelNotFoundError: If the team has no such channel
        """
        if not isinstance(data, Mapping):
            raise InvalidArgumentError("send payload must be a mapping")
        message = data.get("message")
        if not _is_non_empty(message):
            raise InvalidArgumentError("message must be a non-empty string")
        channel = data.get("channel")
        if not _is_non_empty(channel):
            raise InvalidArgumentError("message must have a destination channel")

        user, team = self._require_started()

        channel_id = await self._channels.resolve(channel)
        create_at = int(time.time() * 1000)
        payload = build_post_payload(
            user_id=user["id"],
            channel_id=channel_id,
            message=message,
            create_at=create_at,
        )
        response = await self._post(create_post_path(team["id"], channel_id), payload)
        _LOGGER.debug("[%s] Posted to %s", self._credentials.team, channel)
        return response.data

    async def resolve_channel_id(self, name: str) -> str:
        """Return the identifier of a channel in the configured team."""
        if not _is_non_empty(name):
            raise InvalidArgumentError("channel name must be a non-empty string")
        return await self._channels.resolve(name)

    async def ping(self) -> None:
        """Send a single ping frame over the event socket."""
        if self._ws is None:
            raise NotStartedError("cannot ping because connection has not yet started")
        await self._ws.send_text(PING_FRAME)

    # -------------------------------------------------------------------------
    # Internal: HTTP
    # -------------------------------------------------------------------------

    def _http_client(self) -> MattermostHttpClient:
        if self._http is None:
            if self._session is None:
                self._session = aiohttp.ClientSession()
            self._http = MattermostHttpClient(
                self._session,
                self._credentials.host,
                timeout=self._request_timeout,
            )
        return self._http

    async def _get(self, path: str) -> ApiResponse:
        return await self._http_client().get(path, self.headers())

    async def _post(self, path: str, payload: dict[str, Any]) -> ApiResponse:
        """POST payload, adopting any session token the response carries."""
        response = await self._http_client().post(path, payload, self.headers())
        if response.token:
            self._state.token = response.token
        return response

    async def _login(self) -> None:
        body = build_login_body(
            team=self._credentials.team,
            login_id=self._credentials.login_id,
            password=self._credentials.password,
        )
        try:
            response = await self._post(LOGIN_PATH, body)
        except MattermostResponseError as err:
            if err.status in (401, 403):
                raise AuthenticationError(
                    f"could not log in: server returned {err.status}"
                ) from err
            raise

        # A token kept from an earlier failed start does not count.
        if not response.token:
            raise AuthenticationError("could not log in: no session token returned")

    async def _fetch_channels(self) -> Any:
        team = self._state.team
        if team is None:
            raise NotStartedError("team is unknown until start() has loaded it")
        response = await self._get(channels_path(team["id"]))
        return response.data

    def _require_started(self) -> tuple[dict[str, Any], dict[str, Any]]:
        user = self._state.user
        team = self._state.team
        if not self._started or self._ws is None or user is None or team is None:
            raise NotStartedError(
                "cannot send message because connection has not yet started"
            )
        return user, team

    # -------------------------------------------------------------------------
    # Internal: Event socket
    # -------------------------------------------------------------------------

    async def _listen(self) -> None:
        """Dispatch inbound events until the socket closes."""
        ws = self._ws
        if ws is None:
            return

        team_name = self._credentials.team
        message_count = 0
        try:
            async for msg in ws:
                if msg.type is MattermostWsMessageType.TEXT:
                    message_count += 1
                    await self._handle_message(msg)
                elif msg.type is MattermostWsMessageType.CLOSED:
                    _LOGGER.info("[%s] WebSocket closed by server", team_name)
                    break
                elif msg.type is MattermostWsMessageType.ERROR:
                    _LOGGER.error("[%s] WebSocket error", team_name)
                    break
        except asyncio.CancelledError:
            _LOGGER.debug(
                "[%s] Listener cancelled (%d messages)", team_name, message_count
            )
            raise

    async def _handle_message(self, msg: MattermostWsMessage) -> None:
        team_name = self._credentials.team
        try:
            payload = MattermostWsClient.decode_event(msg)
        except ValueError as err:
            _LOGGER.warning("[%s] Invalid message: %s", team_name, err)
            return

        if payload is None:
            _LOGGER.debug(
                "[%s] Dropping message without event: %s", team_name, msg.data
            )
            return

        try:
            await self._events.dispatch(self, payload)
        except Exception as err:
            _LOGGER.exception(
                "[%s] Callback error for event %s: %s",
                team_name,
                payload["event"],
                err,
            )

    # -------------------------------------------------------------------------
    # Internal: Keepalive
    # -------------------------------------------------------------------------

    async def _keepalive_loop(self) -> None:
        """Send a ping frame every keepalive interval."""
        try:
            while True:
                await asyncio.sleep(self._keepalive_interval)
                await self.ping()
        except asyncio.CancelledError:
            _LOGGER.debug("[%s] Keepalive cancelled", self._credentials.team)
            raise
        except MattermostClientError as err:
            _LOGGER.warning(
                "[%s] Keepalive stopped: %s", self._credentials.team, err
            )
