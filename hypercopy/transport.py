"""HTTP transport for the REST API."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass

import aiohttp

from .errors import (
    ClientRequestError,
    GenericRequestError,
    JsonParseError,
    ServerRequestError,
)
from .helpers import BaseUrl
from .records import from_wire


@dataclass
class _ErrorData:
    data: str
    code: int
    msg: str


def parse_response(status_code: int, text: str) -> str:
    """Return ``text`` for a successful status, otherwise raise the matching error."""
    if status_code < 400:
        return text
    if 400 <= status_code < 500:
        try:
            error_data = from_wire(_ErrorData, json.loads(text))
        except (ValueError, JsonParseError) as exc:
            raise ClientRequestError(
                status_code, text, error_code=None, error_data=str(exc)
            ) from None
        raise ClientRequestError(
            status_code,
            error_data.msg,
            error_code=error_data.code,
            error_data=error_data.data,
        )
    raise ServerRequestError(status_code, text)


class HttpClient:
    """Posts JSON bodies to the API at ``base_url``."""

    def __init__(self, base_url: str, session: aiohttp.ClientSession | None = None) -> None:
        self.base_url = base_url
        self._session = session
        self._owns_session = session is None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def post(self, url_path: str, data: str) -> str:
        """POST ``data`` as JSON to ``base_url + url_path`` and return the body."""
        session = self._ensure_session()
        try:
            async with session.post(
                f"{self.base_url}{url_path}",
                data=data.encode(),
                headers={"Content-Type": "application/json"},
            ) as response:
                status = response.status
                text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GenericRequestError(str(exc) or type(exc).__name__) from exc
        return parse_response(status, text)

    def is_mainnet(self) -> bool:
        return self.base_url == BaseUrl.MAINNET.url()

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"HttpClient(base_url={self.base_url!r})"