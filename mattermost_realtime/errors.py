"""Error types for Mattermost client failures."""

from __future__ import annotations


class MattermostClientError(Exception):
    """Base error for Mattermost client failures."""


class ConfigurationError(MattermostClientError):
    """A required constructor argument is missing or empty."""


class AuthenticationError(MattermostClientError):
    """Login did not yield a session token."""


class ProtocolError(MattermostClientError):
    """Server response is missing expected fields or has an unexpected shape."""


class ChannelNotFoundError(MattermostClientError):
    """Channel name is absent from the team's channel list."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"channel {channel} was not found")
        self.channel = channel


class NotStartedError(MattermostClientError):
    """Operation requires a started client."""


class InvalidArgumentError(MattermostClientError):
    """Caller supplied a malformed argument."""


class MattermostTimeout(MattermostClientError):
    """Timeout while communicating with the server."""


class MattermostConnectionError(MattermostClientError):
    """Network connection to the server failed."""


class MattermostHandshakeError(MattermostClientError):
    """WebSocket handshake failed."""


class MattermostResponseError(MattermostClientError):
    """HTTP response error from the server."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        path: str | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.path = path
        self.body = body
