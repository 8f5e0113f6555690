"""Asyncio client for the Mattermost web service and event socket."""

__version__ = "0.1.0"

from .channels import ChannelResolver
from .client import Credentials, MattermostClient, SessionState
from .errors import (
    AuthenticationError,
    ChannelNotFoundError,
    ConfigurationError,
    InvalidArgumentError,
    MattermostClientError,
    MattermostConnectionError,
    MattermostHandshakeError,
    MattermostResponseError,
    MattermostTimeout,
    NotStartedError,
    ProtocolError,
)
from .events import EventDispatcher
from .transport import (
    ApiResponse,
    MattermostHttpClient,
    MattermostWsClient,
    MattermostWsMessage,
    MattermostWsMessageType,
    connect_websocket,
)

__all__ = [
    "ApiResponse",
    "AuthenticationError",
    "ChannelNotFoundError",
    "ChannelResolver",
    "ConfigurationError",
    "Credentials",
    "EventDispatcher",
    "InvalidArgumentError",
    "MattermostClient",
    "MattermostClientError",
    "MattermostConnectionError",
    "MattermostHandshakeError",
    "MattermostHttpClient",
    "MattermostResponseError",
    "MattermostTimeout",
    "MattermostWsClient",
    "MattermostWsMessage",
    "MattermostWsMessageType",
    "NotStartedError",
    "ProtocolError",
    "SessionState",
    "__version__",
    "connect_websocket",
]
