"""Transport layer for the Mattermost client.

This package contains the HTTP and WebSocket IO:
- http: HTTP client for REST API calls
- ws: WebSocket connection setup
- ws_client: WebSocket send and message iteration
"""

from .http import ApiResponse, MattermostHttpClient
from .ws import connect_websocket
from .ws_client import MattermostWsClient, MattermostWsMessage, MattermostWsMessageType

__all__ = [
    "ApiResponse",
    "MattermostHttpClient",
    "MattermostWsClient",
    "MattermostWsMessage",
    "MattermostWsMessageType",
    "connect_websocket",
]
