"""Protocol helpers for the Mattermost v3 web service API.

This module holds the pure parts of the client: endpoint paths, header
derivation from session state, request body builders and response parsers.
Nothing here performs I/O.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

from .errors import ProtocolError

LOGIN_PATH: Final = "api/v3/users/login"
INITIAL_LOAD_PATH: Final = "api/v3/users/initial_load"
WEBSOCKET_PATH: Final = "api/v3/users/websocket"

TOKEN_HEADER: Final = "Token"
AUTH_COOKIE: Final = "MMAUTHTOKEN"
DEFAULT_USER_AGENT: Final = "mattermost-realtime"

_SCHEME_RE: Final = re.compile(r"^https?://", re.IGNORECASE)
_HTTP_SCHEME_RE: Final = re.compile(r"^http(s)?://", re.IGNORECASE)


def normalize_host(host: str) -> str:
    """Return host as a base URL with a scheme and exactly one trailing slash.

    Hosts given without an http(s) scheme default to https.
    """
    if not _SCHEME_RE.match(host):
        host = f"https://{host}"
    return host.rstrip("/") + "/"


def websocket_url(host: str) -> str:
    """Derive the event socket URL from a normalized host.

    https maps to wss and http maps to ws.
    """
    url = _HTTP_SCHEME_RE.sub(
        lambda match: "wss://" if match.group(1) else "ws://",
        host,
        count=1,
    )
    return f"{url}{WEBSOCKET_PATH}"


def channels_path(team_id: str) -> str:
    """Path of the channel list for a team."""
    return f"api/v3/teams/{team_id}/channels/"


def create_post_path(team_id: str, channel_id: str) -> str:
    """Path of the post creation endpoint for a channel."""
    return f"api/v3/teams/{team_id}/channels/{channel_id}/posts/create"


def build_headers(
    token: str | None, *, user_agent: str = DEFAULT_USER_AGENT
) -> dict[str, str]:
    """Build request headers for the current session token.

    initial_load accepts the cookie alone while other endpoints such as the
    channel list require the Authorization header, so both are sent whenever
    a token is known.
    """
    headers = {
        "Content-Type": "application/json",
        "X-Requested-With": "XMLHttpRequest",
        "User-Agent": user_agent,
    }
    if token:
        headers["Cookie"] = f"{AUTH_COOKIE}={token}"
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_login_body(*, team: str, login_id: str, password: str) -> dict[str, str]:
    """Build the login request body."""
    return {"name": team, "login_id": login_id, "password": password}


def build_post_payload(
    *,
    user_id: str,
    channel_id: str,
    message: str,
    create_at: int,
) -> dict[str, Any]:
    """Build a post creation payload.

    Args:
        user_id: Identifier of the posting user.
        channel_id: Resolved channel identifier.
        message: Message text.
        create_at: Creation time in epoch milliseconds.

    Returns:
        Payload dict whose pending_post_id lets the server deduplicate
        resubmissions of the same post.
    """
    return {
        "user_id": user_id,
        "channel_id": channel_id,
        "message": message,
        "create_at": create_at,
        "filenames": [],
        "pending_post_id": f"{user_id}:{create_at}",
    }


def parse_initial_load(
    data: Any, team_name: str
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Extract the user and the configured team from an initial_load response.

    Raises:
        ProtocolError: If the user or a team named team_name is missing.
    """
    if not isinstance(data, Mapping):
        raise ProtocolError("initial_load response is not an object")

    user = data.get("user")
    if not isinstance(user, Mapping) or "id" not in user:
        raise ProtocolError("did not receive valid initial_load user data")

    teams = data.get("teams")
    if not isinstance(teams, list):
        raise ProtocolError("did not receive valid initial_load teams data")

    for team in teams:
        if isinstance(team, Mapping) and team.get("name") == team_name:
            return dict(user), dict(team)

    raise ProtocolError(f"team {team_name} not present in initial_load teams data")


def parse_channel_list(data: Any) -> dict[str, str]:
    """Map channel names to identifiers from a channel list response.

    Accepts either ``{"channels": [...]}`` or a bare list. Entries without a
    string ``id`` and ``name`` are skipped.

    Raises:
        ProtocolError: If no channel list is present.
    """
    channels = data.get("channels") if isinstance(data, Mapping) else data
    if not isinstance(channels, list):
        raise ProtocolError("no channels returned")

    result: dict[str, str] = {}
    for channel in channels:
        if not isinstance(channel, Mapping):
            continue
        channel_id = channel.get("id")
        name = channel.get("name")
        if isinstance(channel_id, str) and isinstance(name, str):
            result[name] = channel_id
    return result


def parse_event(data: Any) -> dict[str, Any] | None:
    """Return data as an event payload, or None if it carries no event name."""
    if not isinstance(data, dict):
        return None
    if not isinstance(data.get("event"), str):
        return None
    return data
