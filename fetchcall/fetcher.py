# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Compiled calls: one descriptor, one transport, one exchange per call."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Generic, TypeVar
from urllib.parse import urlencode

import httpx
import msgspec

from ._errors import DefinitionError, HttpError, PipelineError
from .descriptor import CallDescriptor
from .transport import HTTPXTransport, Transport, TransportRequest
from .types import CallResult, ParserKind, Unset
from .utils import (
    BodyInfo,
    get_body_info,
    join_url,
    merge_headers,
    merge_query_params,
)

__all__ = ("Fetcher",)

logger = logging.getLogger(__name__)

R = TypeVar("R")
A = TypeVar("A")
E = TypeVar("E")


def _get_base_url(args: Any) -> Any:
    if isinstance(args, Mapping):
        return args.get("base_url")
    return getattr(args, "base_url", None)


class Fetcher(Generic[R, A, E]):
    """An invocable call produced by ``CallBuilder.build()``.

    Each invocation resolves every fragment from its own argument bag and
    only reads the frozen descriptor, so concurrent invocations never
    interfere.
    """

    __slots__ = ("_descriptor", "_transport")

    def __init__(
        self, descriptor: CallDescriptor, transport: Transport | None = None
    ):
        self._descriptor = descriptor
        self._transport = transport if transport is not None else HTTPXTransport()

    @property
    def descriptor(self) -> CallDescriptor:
        return self._descriptor

    @property
    def transport(self) -> Transport:
        return self._transport

    def __repr__(self) -> str:
        return f"Fetcher(method={self._descriptor.method.value})"

    def _resolve_base_url(self, args: Any) -> httpx.URL:
        base_url = self._descriptor.base_url
        if base_url is not Unset:
            return base_url
        base_url = _get_base_url(args)
        if not base_url:
            raise DefinitionError(
                "No base_url set on the call and none supplied in the arguments"
            )
        return httpx.URL(base_url)

    def _build_request(self, base_url: httpx.URL, args: Any) -> TransportRequest:
        d = self._descriptor

        url = join_url(base_url, d.path_resolver(args))
        pairs = merge_query_params(r(args) for r in d.query_resolvers)
        if pairs:
            # a query string embedded in the path stays ahead of merged params
            query = urlencode(pairs).encode("ascii")
            if url.query:
                query = url.query + b"&" + query
            url = url.copy_with(query=query)

        headers = merge_headers(r(args) for r in d.header_resolvers)
        body = BodyInfo()
        if d.body_resolver is not Unset:
            body = get_body_info(d.body_resolver(args))
        if body.content_type and "content-type" not in headers:
            headers["Content-Type"] = body.content_type

        return TransportRequest(
            method=d.method,
            url=url,
            headers=headers,
            body=body,
            options=d.transport_options,
        )

    async def __call__(self, args: A | None = None) -> CallResult[R, E]:
        d = self._descriptor
        base_url = self._resolve_base_url(args)

        request: TransportRequest | None = None
        response: httpx.Response | None = None
        body_text: str | None = None
        try:
            request = self._build_request(base_url, args)
            logger.debug(f"Sending {request.method.value} {request.url}")
            response = await self._transport.send(request)

            if not response.is_success:
                error = HttpError(response, request=request)
            else:
                data = None
                parser = d.parser
                if parser is not Unset:
                    if parser.kind is ParserKind.RESPONSE:
                        data = parser.func(response, args)
                        if inspect.isawaitable(data):
                            data = await data
                    else:
                        body_text = response.text
                        if parser.kind is ParserKind.JSON:
                            data = parser.func(msgspec.json.decode(body_text), args)
                        else:
                            data = parser.func(body_text, args)

                for mapper in d.mappers:
                    data = mapper(data, args)
                return CallResult.ok(data)
        except Exception as e:
            error = PipelineError(
                e, response=response, body_text=body_text, request=request
            )

        return await self._fail(error, args)

    async def _fail(self, error: Any, args: Any) -> CallResult[R, E]:
        logger.debug(f"Call failed: {error!r}")
        for mapper in self._descriptor.error_mappers:
            error = mapper(error, args)
            if inspect.isawaitable(error):
                error = await error
        return CallResult.fail(error)
