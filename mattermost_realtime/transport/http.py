"""HTTP client for Mattermost web service endpoints."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..errors import (
    MattermostConnectionError,
    MattermostResponseError,
    MattermostTimeout,
)
from ..protocol import TOKEN_HEADER

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """Decoded API response."""

    status: int
    data: Any
    token: str | None = None


class MattermostHttpClient:
    """HTTP client wrapper for Mattermost API endpoints."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        *,
        timeout: float = 10.0,
    ) -> None:
        self._session = session
        self._host = host
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self._host}{path}"

    async def get(self, path: str, headers: dict[str, str]) -> ApiResponse:
        """GET path and decode the JSON response."""
        _LOGGER.debug("GET %s", path)
        try:
            async with self._session.get(
                self._url(path),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                return await self._decode(path, resp)
        except TimeoutError as err:
            raise MattermostTimeout(f"GET {path} timed out") from err
        except aiohttp.ClientError as err:
            raise MattermostConnectionError(f"GET {path} failed: {err}") from err

    async def post(
        self, path: str, payload: dict[str, Any], headers: dict[str, str]
    ) -> ApiResponse:
        """POST a JSON payload to path and decode the JSON response.

        The returned token is the session token header of the response, if
        the server sent one.
        """
        _LOGGER.debug("POST %s", path)
        try:
            async with self._session.post(
                self._url(path),
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                return await self._decode(path, resp)
        except TimeoutError as err:
            raise MattermostTimeout(f"POST {path} timed out") from err
        except aiohttp.ClientError as err:
            raise MattermostConnectionError(f"POST {path} failed: {err}") from err

    @staticmethod
    async def _decode(path: str, resp: aiohttp.ClientResponse) -> ApiResponse:
        try:
            body = await resp.text()
        except UnicodeDecodeError as err:
            raise MattermostResponseError(
                resp.status,
                f"unable to call {path}: {resp.status} undecodable response body",
                path=path,
            ) from err
        if resp.status >= 400:
            raise MattermostResponseError(
                resp.status,
                f"unable to call {path}: {resp.status} {body}",
                path=path,
                body=body,
            )
        try:
            data = json.loads(body)
        except ValueError as err:
            raise MattermostResponseError(
                resp.status,
                f"unable to call {path}: {resp.status} {body}",
                path=path,
                body=body,
            ) from err
        return ApiResponse(
            status=resp.status,
            data=data,
            token=resp.headers.get(TOKEN_HEADER) or None,
        )
