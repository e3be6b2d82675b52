# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from ._errors import (
    DefinitionError,
    FetchCallError,
    HttpError,
    ParseError,
    PipelineError,
    unwrap_error,
)
from .builder import CallBuilder, build_call
from .config import FetchCallSettings, settings
from .descriptor import CallDescriptor
from .fetcher import Fetcher
from .forms import FormFile, MultipartForm
from .transport import HTTPXTransport, Transport, TransportRequest
from .types import CallResult, HttpMethod, Unset
from .validators import with_pydantic
from .version import __version__

logger = logging.getLogger(__name__)

__all__ = (
    "__version__",
    "CallBuilder",
    "CallDescriptor",
    "CallResult",
    "DefinitionError",
    "FetchCallError",
    "FetchCallSettings",
    "Fetcher",
    "FormFile",
    "HTTPXTransport",
    "HttpError",
    "HttpMethod",
    "MultipartForm",
    "ParseError",
    "PipelineError",
    "Transport",
    "TransportRequest",
    "Unset",
    "build_call",
    "logger",
    "settings",
    "unwrap_error",
    "with_pydantic",
)
