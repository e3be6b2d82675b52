# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum as _Enum
from typing import Any, Final, Generic, Literal, TypeVar, Union

import httpx

__all__ = (
    "Unset",
    "UnsetType",
    "MaybeUnset",
    "Enum",
    "HttpMethod",
    "ParserKind",
    "BODYLESS_METHODS",
    "QueryParam",
    "HeadersInit",
    "CallResult",
)

T = TypeVar("T")
R = TypeVar("R")
E = TypeVar("E")


class _SingletonMeta(type):
    """Metaclass that guarantees exactly one instance per subclass.

    Sentinel values keep their identity across the whole application, so
    identity checks with ``is`` are safe.
    """

    _cache: dict[type, Any] = {}

    def __call__(cls, *a, **kw):
        if cls not in cls._cache:
            cls._cache[cls] = super().__call__(*a, **kw)
        return cls._cache[cls]


class UnsetType(metaclass=_SingletonMeta):
    """Sentinel for a descriptor slot that has not been configured yet.

    ``None`` is a legitimate value in several places (a body resolver may
    return it, a parser may produce it), so unconfigured slots use this
    sentinel instead.

    Example:
        >>> UnsetType() is Unset
        True
    """

    __slots__ = ()

    def __deepcopy__(self, memo):  # copy & deepcopy both noop
        return self

    def __copy__(self):
        return self

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> Literal["Unset"]:
        return "Unset"

    def __reduce__(self):
        """Ensure pickle preservation of singleton identity."""
        return "Unset"


Unset: Final = UnsetType()
"""A descriptor slot present but not yet configured."""

MaybeUnset = Union[T, UnsetType]


class Enum(_Enum):
    @classmethod
    def allowed(cls) -> tuple[str, ...]:
        return tuple(e.value for e in cls)


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"


class ParserKind(str, Enum):
    JSON = "json"
    TEXT = "text"
    RESPONSE = "response"


# GET and HEAD never carry a request body; DELETE may.
BODYLESS_METHODS: Final = frozenset({HttpMethod.GET, HttpMethod.HEAD})

Primitive = Union[str, int, float, bool, None]

QueryParam = Union[
    Mapping[str, Union[Primitive, Sequence[Primitive]]],
    Sequence[tuple[str, Primitive]],
    httpx.QueryParams,
    str,
]

HeadersInit = Union[
    Mapping[str, Any],
    Sequence[tuple[str, Any]],
    httpx.Headers,
]


@dataclass(slots=True, frozen=True)
class CallResult(Generic[R, E]):
    """Outcome of one fetcher invocation.

    Exactly one of ``body`` and ``error`` is meaningful, selected by
    ``success``. Fetchers return this instead of raising for HTTP and
    pipeline failures.
    """

    success: bool
    body: R | None = None
    error: E | None = None

    @classmethod
    def ok(cls, body: R) -> CallResult[R, E]:
        return cls(success=True, body=body, error=None)

    @classmethod
    def fail(cls, error: E) -> CallResult[R, E]:
        return cls(success=False, body=None, error=error)
