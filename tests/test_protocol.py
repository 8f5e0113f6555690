"""Tests for Mattermost protocol helpers."""

from __future__ import annotations

import pytest

from mattermost_realtime.errors import ProtocolError
from mattermost_realtime.protocol import (
    build_headers,
    build_login_body,
    build_post_payload,
    channels_path,
    create_post_path,
    normalize_host,
    parse_channel_list,
    parse_event,
    parse_initial_load,
    websocket_url,
)


class TestNormalizeHost:
    """Tests for normalize_host()."""

    @pytest.mark.parametrize(
        ("host", "expected"),
        [
            ("chat.example.com", "https://chat.example.com/"),
            ("chat.example.com/", "https://chat.example.com/"),
            ("http://chat.example.com", "http://chat.example.com/"),
            ("https://chat.example.com//", "https://chat.example.com/"),
            ("HTTPS://chat.example.com", "HTTPS://chat.example.com/"),
            ("chat.example.com:8065/mm", "https://chat.example.com:8065/mm/"),
        ],
    )
    def test_normalizes(self, host: str, expected: str) -> None:
        """Test scheme defaulting and single trailing slash."""
        assert normalize_host(host) == expected


class TestWebsocketUrl:
    """Tests for websocket_url()."""

    def test_secure_host(self) -> None:
        """Test https maps to wss."""
        assert (
            websocket_url("https://chat.example.com/")
            == "wss://chat.example.com/api/v3/users/websocket"
        )

    def test_insecure_host(self) -> None:
        """Test http maps to ws."""
        assert (
            websocket_url("http://localhost:8065/")
            == "ws://localhost:8065/api/v3/users/websocket"
        )

    def test_uppercase_scheme(self) -> None:
        """Test scheme matching ignores case."""
        assert websocket_url("HTTPS://chat.example.com/").startswith("wss://")


class TestBuildHeaders:
    """Tests for build_headers()."""

    def test_without_token(self) -> None:
        """Test only base headers are sent before login."""
        headers = build_headers(None)
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Requested-With"] == "XMLHttpRequest"
        assert "Cookie" not in headers
        assert "Authorization" not in headers

    def test_with_token(self) -> None:
        """Test cookie and bearer headers carry the same token."""
        headers = build_headers("abc")
        assert headers["Cookie"] == "MMAUTHTOKEN=abc"
        assert headers["Authorization"] == "Bearer abc"

    def test_user_agent(self) -> None:
        """Test custom user agent."""
        assert build_headers(None, user_agent="bot/1.0")["User-Agent"] == "bot/1.0"


class TestBuilders:
    """Tests for request body builders and paths."""

    def test_login_body(self) -> None:
        """Test login body field names."""
        assert build_login_body(team="t", login_id="u@example.com", password="p") == {
            "name": "t",
            "login_id": "u@example.com",
            "password": "p",
        }

    def test_post_payload(self) -> None:
        """Test pending_post_id combines user id and create_at."""
        payload = build_post_payload(
            user_id="user1",
            channel_id="chan1",
            message="hi",
            create_at=1700000000123,
        )
        assert payload == {
            "user_id": "user1",
            "channel_id": "chan1",
            "message": "hi",
            "create_at": 1700000000123,
            "filenames": [],
            "pending_post_id": "user1:1700000000123",
        }

    def test_paths(self) -> None:
        """Test team and channel scoped paths."""
        assert channels_path("team1") == "api/v3/teams/team1/channels/"
        assert (
            create_post_path("team1", "chan1")
            == "api/v3/teams/team1/channels/chan1/posts/create"
        )


class TestParseInitialLoad:
    """Tests for parse_initial_load()."""

    def test_selects_matching_team(self) -> None:
        """Test the configured team is selected from the team list."""
        data = {
            "user": {"id": "user1"},
            "teams": [{"id": "t0", "name": "other"}, {"id": "t1", "name": "mine"}],
        }
        user, team = parse_initial_load(data, "mine")
        assert user == {"id": "user1"}
        assert team == {"id": "t1", "name": "mine"}

    def test_missing_user_id(self) -> None:
        """Test user without id is rejected."""
        with pytest.raises(ProtocolError, match="user data"):
            parse_initial_load({"user": {}, "teams": []}, "mine")

    def test_teams_not_list(self) -> None:
        """Test non-list teams is rejected."""
        with pytest.raises(ProtocolError, match="teams data"):
            parse_initial_load({"user": {"id": "u"}, "teams": {}}, "mine")

    def test_no_matching_team(self) -> None:
        """Test missing team is rejected."""
        data = {"user": {"id": "u"}, "teams": [{"id": "t0", "name": "other"}]}
        with pytest.raises(ProtocolError, match="team mine"):
            parse_initial_load(data, "mine")

    def test_not_an_object(self) -> None:
        """Test non-object response is rejected."""
        with pytest.raises(ProtocolError):
            parse_initial_load(["user"], "mine")


class TestParseChannelList:
    """Tests for parse_channel_list()."""

    def test_wrapped_list(self) -> None:
        """Test channels wrapped in an object."""
        data = {"channels": [{"id": "c1", "name": "town-square"}]}
        assert parse_channel_list(data) == {"town-square": "c1"}

    def test_bare_list(self) -> None:
        """Test a bare channel list."""
        assert parse_channel_list([{"id": "c1", "name": "a"}]) == {"a": "c1"}

    def test_skips_malformed_entries(self) -> None:
        """Test entries lacking id or name are skipped."""
        data = {
            "channels": [
                {"id": "c1", "name": "a"},
                {"name": "no-id"},
                "junk",
                {"id": 5, "name": "numeric"},
            ]
        }
        assert parse_channel_list(data) == {"a": "c1"}

    def test_missing_list(self) -> None:
        """Test a response without a channel list."""
        with pytest.raises(ProtocolError, match="no channels returned"):
            parse_channel_list({"channels": None})


class TestParseEvent:
    """Tests for parse_event()."""

    def test_event_payload(self) -> None:
        """Test payload with event name passes through."""
        payload = {"event": "posted", "data": {}}
        assert parse_event(payload) is payload

    @pytest.mark.parametrize("data", [{"seq_reply": 1}, {"event": 3}, ["event"], "x"])
    def test_non_event(self, data: object) -> None:
        """Test payloads without a string event name."""
        assert parse_event(data) is None
