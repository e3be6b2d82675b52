# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Immutable record of everything configured for a not-yet-built call."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import httpx
from typing_extensions import Self

from .types import HttpMethod, MaybeUnset, ParserKind, Unset

__all__ = ("CallDescriptor", "Parser", "Resolver")

Resolver = Callable[[Any], Any]


@dataclass(slots=True, frozen=True)
class Parser:
    kind: ParserKind
    func: Callable[[Any, Any], Any]


@dataclass(slots=True, frozen=True)
class CallDescriptor:
    """Append-only call configuration.

    Never mutated: ``with_updates`` and ``append`` return a structural copy
    with one field changed, so descriptors that share a history stay
    independent once they diverge.
    """

    method: MaybeUnset[HttpMethod] = Unset
    base_url: MaybeUnset[httpx.URL] = Unset
    path_resolver: MaybeUnset[Resolver] = Unset
    query_resolvers: tuple[Resolver, ...] = ()
    header_resolvers: tuple[Resolver, ...] = ()
    body_resolver: MaybeUnset[Resolver] = Unset
    parser: MaybeUnset[Parser] = Unset
    mappers: tuple[Callable[[Any, Any], Any], ...] = ()
    error_mappers: tuple[Callable[[Any, Any], Any], ...] = ()
    transport_options: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def with_updates(self, **kwargs: Any) -> Self:
        return dataclasses.replace(self, **kwargs)

    def append(self, name: str, item: Any) -> Self:
        """Copy with ``item`` appended to the tuple field ``name``."""
        return dataclasses.replace(self, **{name: (*getattr(self, name), item)})

    def merge_transport_options(self, options: Mapping[str, Any]) -> Self:
        return dataclasses.replace(
            self,
            transport_options=MappingProxyType({**self.transport_options, **options}),
        )
