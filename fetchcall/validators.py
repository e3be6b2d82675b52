# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Adapters that turn schema validators into parse callbacks."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ._errors import ParseError

__all__ = ("with_pydantic",)

T = TypeVar("T")


def with_pydantic(type_: type[T] | Any) -> Callable[[Any], T]:
    """Build a parse callback that validates data against ``type_``.

    ``type_`` is anything pydantic can validate: a model, ``list[Model]``,
    a ``TypedDict``. Rejected input raises ``ParseError`` with the pydantic
    error as its cause, so an error mapper can pick it out with
    ``unwrap_error``.

    Example:
        >>> builder.parse_json(with_pydantic(list[User]))
    """
    adapter = TypeAdapter(type_)
    adapter_name = getattr(type_, "__name__", repr(type_))

    def parse(data: Any) -> T:
        try:
            return adapter.validate_python(data)
        except PydanticValidationError as e:
            raise ParseError(
                f"Response does not match {adapter_name}",
                details={"errors": e.errors(include_url=False)},
                cause=e,
            ) from e

    return parse
