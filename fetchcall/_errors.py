# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Error hierarchy for fetchcall.

Two families of errors exist:

- Definition errors are programming mistakes in a call definition. They are
  raised synchronously from builder methods, ``build()`` and the base URL
  check, and never reach error mappers.
- Runtime errors (``HttpError``, ``PipelineError``) describe a failed
  exchange. Fetchers never raise them; they are routed through the error
  mapper chain and returned inside a failed ``CallResult``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    import httpx

    from .transport import TransportRequest

__all__ = (
    "FetchCallError",
    "DefinitionError",
    "HttpError",
    "PipelineError",
    "ParseError",
    "unwrap_error",
)


class FetchCallError(Exception):
    """Unified base for all fetchcall errors.

    Provides structured error handling with:
    - Rich context in ``details``
    - Machine-readable error codes
    - Standard serialization for logging
    """

    default_message: ClassVar[str] = "fetchcall error"
    default_status_code: ClassVar[int] = 500
    code: ClassVar[str] = "fetchcall_error"

    __slots__ = ("message", "details", "status_code")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause is not None:
            self.__cause__ = cause  # preserves traceback chain
        self.message = message or self.default_message
        self.details = details or {}
        self.status_code = status_code or type(self).default_status_code

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        """Serialize error to structured dictionary for logging."""
        data = {
            "error": self.__class__.__name__,
            "code": type(self).code,
            "message": self.message,
            "status_code": self.status_code,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> BaseException | None:
        """Get the cause of this error, if any."""
        return self.__cause__


class DefinitionError(FetchCallError):
    """A call definition is inconsistent or incomplete."""

    default_message = "Invalid call definition"
    code = "definition_error"

    __slots__ = ()


class HttpError(FetchCallError):
    """The server answered with a status outside the 2xx range.

    The live response is kept so error mappers can still read its body.
    """

    default_message = "HTTP error"
    code = "http_error"

    __slots__ = ("status", "status_text", "response", "request")

    def __init__(
        self,
        response: httpx.Response,
        *,
        request: TransportRequest | None = None,
    ):
        status_text = response.reason_phrase
        super().__init__(
            f"{response.status_code} {status_text}",
            status_code=response.status_code,
            details={"status": response.status_code},
        )
        self.status = response.status_code
        self.status_text = status_text
        self.response = response
        self.request = request


class PipelineError(FetchCallError):
    """Wraps any exception raised while resolving, sending, parsing or mapping."""

    default_message = "Pipeline error"
    code = "pipeline_error"

    __slots__ = ("cause", "response", "body_text", "request")

    def __init__(
        self,
        cause: BaseException,
        *,
        response: httpx.Response | None = None,
        body_text: str | None = None,
        request: TransportRequest | None = None,
    ):
        super().__init__(
            type(cause).__name__,
            details={"cause": str(cause)},
            cause=cause,
        )
        self.cause = cause
        self.response = response
        self.body_text = body_text
        self.request = request

    def unwrap(self) -> BaseException:
        return self.cause


class ParseError(FetchCallError):
    """A parse callback rejected its input."""

    default_message = "Parsing failed"
    default_status_code = 422
    code = "parse_failed"

    __slots__ = ()


def unwrap_error(error: Any) -> Any:
    """Return the original exception behind a ``PipelineError``.

    Any other value is returned unchanged, which makes this safe to call
    from an error mapper regardless of which failure path produced the error.
    """
    if isinstance(error, PipelineError):
        return error.unwrap()
    return error
