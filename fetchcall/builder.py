# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Fluent, immutable definition of HTTP calls.

Example:
    >>> get_user = (
    ...     build_call()
    ...     .base_url("https://api.example.org")
    ...     .method("get")
    ...     .path(lambda args: f"/users/{args['user_id']}")
    ...     .parse_json(lambda data: data["user"])
    ...     .map(lambda user: user["name"])
    ...     .build()
    ... )
    >>> result = await get_user({"user_id": 42})

Every method returns a new builder and leaves its receiver untouched, so a
shared prefix can be forked into several calls.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, TypeVar

import httpx

from ._errors import DefinitionError, HttpError, PipelineError
from .descriptor import CallDescriptor, Parser
from .fetcher import Fetcher
from .transport import Transport
from .types import (
    BODYLESS_METHODS,
    HeadersInit,
    HttpMethod,
    ParserKind,
    QueryParam,
    Unset,
)
from .utils import adapt_callable

__all__ = ("CallBuilder", "build_call")

logger = logging.getLogger(__name__)

R = TypeVar("R")
A = TypeVar("A")
E = TypeVar("E")
T = TypeVar("T")


def _as_resolver(value: Any) -> Callable[[Any], Any]:
    """Wrap constants so every fragment is resolved the same way."""
    if callable(value):
        return adapt_callable(value, 1)
    return lambda args: value


class CallBuilder(Generic[R, A, E]):
    """Chainable wrapper around one ``CallDescriptor``.

    Type parameters track the success type ``R``, the argument bag ``A`` and
    the error type ``E`` for static checkers only.
    """

    __slots__ = ("_descriptor",)

    def __init__(self, descriptor: CallDescriptor | None = None):
        self._descriptor = descriptor if descriptor is not None else CallDescriptor()

    @property
    def descriptor(self) -> CallDescriptor:
        return self._descriptor

    def __repr__(self) -> str:
        return f"CallBuilder({self._descriptor!r})"

    def args(self, type_: type[T] | None = None) -> CallBuilder[R, T, E]:
        """Declare the argument bag type. Has no runtime effect."""
        return CallBuilder(self._descriptor)

    def method(self, method: HttpMethod | str) -> CallBuilder[R, A, E]:
        if self._descriptor.method is not Unset:
            raise DefinitionError("Can't set method multiple times")
        try:
            method = HttpMethod(method.upper() if isinstance(method, str) else method)
        except ValueError:
            raise DefinitionError(
                f"Unknown HTTP method: {method!r}",
                details={"allowed": HttpMethod.allowed()},
            ) from None
        return CallBuilder(self._descriptor.with_updates(method=method))

    def base_url(self, url: str | httpx.URL) -> CallBuilder[R, A, E]:
        url = httpx.URL(url)
        if not url.is_absolute_url:
            raise DefinitionError(f"Base URL must be absolute: {str(url)!r}")
        return CallBuilder(self._descriptor.with_updates(base_url=url))

    def path(self, path: str | Callable[[A], str]) -> CallBuilder[R, A, E]:
        if self._descriptor.path_resolver is not Unset:
            raise DefinitionError("Can't set path multiple times")
        if not (isinstance(path, str) or callable(path)):
            raise DefinitionError(
                f"Path must be a string or a callable, got {type(path).__name__}"
            )
        return CallBuilder(
            self._descriptor.with_updates(path_resolver=_as_resolver(path))
        )

    def query(
        self, query: QueryParam | Callable[[A], QueryParam]
    ) -> CallBuilder[R, A, E]:
        return CallBuilder(
            self._descriptor.append("query_resolvers", _as_resolver(query))
        )

    def headers(
        self, headers: HeadersInit | Callable[[A], HeadersInit]
    ) -> CallBuilder[R, A, E]:
        return CallBuilder(
            self._descriptor.append("header_resolvers", _as_resolver(headers))
        )

    def body(self, body: Any) -> CallBuilder[R, A, E]:
        if self._descriptor.body_resolver is not Unset:
            raise DefinitionError("Can't set body multiple times")
        return CallBuilder(
            self._descriptor.with_updates(body_resolver=_as_resolver(body))
        )

    def _with_parser(self, kind: ParserKind, func: Callable[..., Any]) -> CallBuilder:
        existing = self._descriptor.parser
        if existing is not Unset:
            raise DefinitionError(
                f"Can't set a {kind.value} parser, "
                f"a {existing.kind.value} parser is already set"
            )
        parser = Parser(kind=kind, func=adapt_callable(func, 2))
        return CallBuilder(self._descriptor.with_updates(parser=parser))

    def parse_json(self, parser: Callable[[Any, A], T]) -> CallBuilder[T, A, E]:
        """Decode the body as JSON and hand it to ``parser``."""
        return self._with_parser(ParserKind.JSON, parser)

    def parse_text(self, parser: Callable[[str, A], T]) -> CallBuilder[T, A, E]:
        """Hand the decoded body text to ``parser``."""
        return self._with_parser(ParserKind.TEXT, parser)

    def parse_response(
        self, parser: Callable[[httpx.Response, A], T | Awaitable[T]]
    ) -> CallBuilder[T, A, E]:
        """Hand the response itself to ``parser``, which may be async."""
        return self._with_parser(ParserKind.RESPONSE, parser)

    def map(self, mapper: Callable[[R, A], T]) -> CallBuilder[T, A, E]:
        return CallBuilder(
            self._descriptor.append("mappers", adapt_callable(mapper, 2))
        )

    def map_error(
        self, mapper: Callable[[E, A], T | Awaitable[T]]
    ) -> CallBuilder[R, A, T]:
        return CallBuilder(
            self._descriptor.append("error_mappers", adapt_callable(mapper, 2))
        )

    def fetch_options(
        self, options: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> CallBuilder[R, A, E]:
        """Shallow-merge transport options, e.g. ``follow_redirects=False``."""
        return CallBuilder(
            self._descriptor.merge_transport_options({**(options or {}), **kwargs})
        )

    def build(self, *, transport: Transport | None = None) -> Fetcher[R, A, E]:
        d = self._descriptor
        if d.path_resolver is Unset:
            raise DefinitionError("No path set")
        if d.method is Unset:
            raise DefinitionError("No method set")
        if d.body_resolver is not Unset and d.method in BODYLESS_METHODS:
            raise DefinitionError(f"Can't include body in {d.method.value} request")

        logger.debug(
            f"Built {d.method.value} call: {len(d.query_resolvers)} query, "
            f"{len(d.header_resolvers)} header resolver(s), "
            f"{len(d.mappers)} mapper(s), {len(d.error_mappers)} error mapper(s)"
        )
        return Fetcher(d, transport)


def build_call() -> CallBuilder[None, Any, HttpError | PipelineError]:
    """Start a new call definition."""
    return CallBuilder()
