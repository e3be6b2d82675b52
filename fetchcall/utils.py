# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Pure helpers used to turn resolved fragments into one HTTP request."""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import parse_qsl

import httpx
import msgspec

from .forms import is_multipart_form, is_urlencoded_form
from .types import HeadersInit, QueryParam

__all__ = (
    "BodyInfo",
    "BodyKind",
    "adapt_callable",
    "get_body_info",
    "join_url",
    "merge_headers",
    "merge_query_params",
)

BodyKind = Literal["none", "text", "bytes", "stream", "urlencoded", "multipart", "json"]


def _raw_segments(url: httpx.URL) -> list[str]:
    path = url.raw_path.partition(b"?")[0].decode("ascii")
    return [s for s in path.split("/") if s]


def join_url(base: str | httpx.URL, path: str) -> httpx.URL:
    """Append ``path`` to the path of ``base``.

    Empty segments are dropped on both sides, so leading and trailing
    slashes never matter: ``join_url("http://h/a/", "/b")`` and
    ``join_url("http://h/a", "b")`` are both ``http://h/a/b``. An absolute
    ``path`` replaces the base entirely. A query string in ``path`` is kept;
    the base's own query string is not.
    """
    base = httpx.URL(base)
    target = httpx.URL(path)
    if target.is_absolute_url:
        return target

    # raw paths keep percent-escapes such as %2F and %3F intact
    segments = _raw_segments(base) + _raw_segments(target)
    raw_path = "/" + "/".join(segments)
    if target.query:
        raw_path += "?" + target.query.decode("ascii")
    return base.copy_with(raw_path=raw_path.encode("ascii"), fragment=None)


def _query_pairs(params: QueryParam) -> list[tuple[str, str]]:
    if isinstance(params, str):
        return parse_qsl(params.lstrip("?"), keep_blank_values=True)
    if isinstance(params, Mapping):
        return httpx.QueryParams(params).multi_items()
    # pair lists keep their exact order, interleaved keys included
    return [
        item for pair in params for item in httpx.QueryParams([pair]).multi_items()
    ]


def merge_query_params(defs: Iterable[QueryParam]) -> list[tuple[str, str]]:
    """Concatenate every pair of every partial set, in order.

    Keys are never de-duplicated: ``[{"a": "1"}, {"a": "2"}]`` yields
    ``[("a", "1"), ("a", "2")]``. The result is a plain pair list because
    ``httpx.QueryParams`` would regroup interleaved keys.
    """
    pairs: list[tuple[str, str]] = []
    for params in defs:
        pairs.extend(_query_pairs(params))
    return pairs


def _replace_header(merged: list[tuple[str, str]], key: str, value: str) -> None:
    lower = key.lower()
    merged[:] = [(k, v) for k, v in merged if k.lower() != lower]
    merged.append((key, value))


def merge_headers(defs: Iterable[HeadersInit]) -> httpx.Headers:
    """Merge partial header sets into one case-insensitive collection.

    A mapping behaves like an object: each of its keys replaces whatever
    earlier sets put under that key. A pair list (or ``httpx.Headers``)
    replaces earlier sets too, but repeated keys inside the same list are
    all kept as separate header lines. ``None`` values are skipped in
    every form.
    """
    merged: list[tuple[str, str]] = []
    for headers in defs:
        if isinstance(headers, httpx.Headers):
            items = headers.multi_items()
        elif isinstance(headers, Mapping):
            for key, value in headers.items():
                if value is not None:
                    _replace_header(merged, key, str(value))
            continue
        else:
            items = headers

        seen: set[str] = set()
        for key, value in items:
            if value is None:
                continue
            lower = key.lower()
            if lower in seen:
                merged.append((key, str(value)))
            else:
                seen.add(lower)
                _replace_header(merged, key, str(value))
    return httpx.Headers(merged)


@dataclass(slots=True, frozen=True)
class BodyInfo:
    """A classified request body.

    ``content_type`` is only set for kinds whose media type is implied by
    the value itself (text and JSON); for the others the transport or an
    explicit header decides.
    """

    kind: BodyKind = "none"
    payload: Any = None
    content_type: str | None = None


def _enc_hook(obj: Any) -> Any:
    # pydantic models
    if callable(getattr(obj, "model_dump", None)):
        return obj.model_dump(mode="json")
    raise TypeError(
        f"Objects of type {type(obj).__name__} are not JSON serializable"
    )


_json_encoder = msgspec.json.Encoder(enc_hook=_enc_hook)


def _is_stream(value: Any) -> bool:
    if callable(getattr(value, "read", None)):
        return True
    return isinstance(value, (Iterator, AsyncIterable))


def get_body_info(data: Any) -> BodyInfo:
    if data is None:
        return BodyInfo()
    if isinstance(data, str):
        return BodyInfo("text", data, "text/plain")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return BodyInfo("bytes", bytes(data))
    if is_multipart_form(data):
        return BodyInfo("multipart", data)
    if is_urlencoded_form(data):
        return BodyInfo("urlencoded", data)
    if _is_stream(data):
        return BodyInfo("stream", data)
    # must be json at this point
    return BodyInfo("json", _json_encoder.encode(data), "application/json")


def _positional_arity(func: Callable[..., Any], max_args: int) -> int:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        # builtins and C types mostly take a single value
        return min(1, max_args)

    count = 0
    for param in sig.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            return max_args
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return min(count, max_args)


def adapt_callable(func: Callable[..., Any], max_args: int) -> Callable[..., Any]:
    """Wrap ``func`` so it can always be called with ``max_args`` arguments.

    Extra trailing arguments are dropped when ``func`` does not accept them,
    which lets callers register ``lambda data: ...`` where a
    ``(data, args)`` callback is expected.
    """
    arity = _positional_arity(func, max_args)
    if arity == max_args:
        return func

    def adapted(*args: Any) -> Any:
        return func(*args[:arity])

    adapted.__wrapped__ = func
    return adapted
