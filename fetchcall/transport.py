# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Transport protocol for the HTTP IO boundary."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

import httpx

from .config import settings
from .forms import URLENCODED_FORM_TAG
from .types import HttpMethod
from .utils import BodyInfo

__all__ = ("HTTPXTransport", "Transport", "TransportRequest")

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192

# Options forwarded to ``httpx.AsyncClient.request``.
_REQUEST_OPTIONS = frozenset(
    {"follow_redirects", "timeout", "auth", "cookies", "extensions"}
)


@dataclass(slots=True, frozen=True)
class TransportRequest:
    """Everything a transport needs to perform one exchange."""

    method: HttpMethod
    url: httpx.URL
    headers: httpx.Headers
    body: BodyInfo = field(default_factory=BodyInfo)
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


class Transport(Protocol):
    """IO boundary for HTTP requests.

    Thin and swappable. All IO happens here. The returned response must be
    fully buffered: parsers read it after ``send`` returns.
    """

    async def send(self, request: TransportRequest) -> httpx.Response:
        """Perform the exchange and return the buffered response."""
        ...


def _to_bytes(chunk: Any) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


async def _aiter_stream(source: Any) -> AsyncIterator[bytes]:
    if isinstance(source, AsyncIterable):
        async for chunk in source:
            yield _to_bytes(chunk)
    elif callable(getattr(source, "read", None)):
        # blocking reads stay off the event loop
        while chunk := await asyncio.to_thread(source.read, _CHUNK_SIZE):
            yield _to_bytes(chunk)
    else:
        for chunk in source:
            yield _to_bytes(chunk)


class HTTPXTransport:
    """HTTPX-based transport implementation.

    Without an injected client, a fresh ``httpx.AsyncClient`` is opened for
    each request, so one transport can serve concurrent calls from several
    event loops. Entering the transport as an async context manager keeps a
    single client open until exit instead.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        follow_redirects: bool | None = None,
        **client_kwargs: Any,
    ):
        self._client = client
        self._owns_client = False
        self.follow_redirects = (
            settings.follow_redirects if follow_redirects is None else follow_redirects
        )
        self._client_kwargs = {**settings.client_kwargs(), **client_kwargs}

    async def __aenter__(self):
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs)
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    async def send(self, request: TransportRequest) -> httpx.Response:
        kwargs = self._request_kwargs(request)
        if self._client is not None:
            return await self._client.request(**kwargs)
        async with httpx.AsyncClient(**self._client_kwargs) as client:
            return await client.request(**kwargs)

    def _request_kwargs(self, request: TransportRequest) -> dict[str, Any]:
        headers = request.headers.copy()
        kwargs: dict[str, Any] = {
            "method": request.method.value,
            "url": request.url,
            "headers": headers,
            "follow_redirects": self.follow_redirects,
        }

        body = request.body
        match body.kind:
            case "none":
                pass
            case "text" | "bytes" | "json":
                kwargs["content"] = body.payload
            case "stream":
                kwargs["content"] = _aiter_stream(body.payload)
            case "urlencoded":
                kwargs["content"] = str(httpx.QueryParams(body.payload.multi_items()))
                if "content-type" not in headers:
                    headers["Content-Type"] = URLENCODED_FORM_TAG
            case "multipart":
                # httpx only adds its boundary header when none is present
                kwargs["files"] = body.payload.to_httpx_files()

        for key, value in request.options.items():
            if key in _REQUEST_OPTIONS:
                kwargs[key] = value
            else:
                logger.warning(f"Ignoring unsupported transport option: {key}")
        return kwargs
