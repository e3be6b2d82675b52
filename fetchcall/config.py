# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FetchCallSettings(BaseSettings, frozen=True):
    """Transport defaults with environment variable support.

    Every field can be overridden with a ``FETCHCALL_`` prefixed variable,
    e.g. ``FETCHCALL_FOLLOW_REDIRECTS=false``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FETCHCALL_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    follow_redirects: bool = Field(
        default=True, description="Follow redirects unless a call overrides it"
    )
    timeout: float | None = Field(
        default=30.0, description="Per-request timeout in seconds, None disables"
    )
    verify_ssl: bool = True
    max_connections: int = 100
    max_keepalive_connections: int = 20

    # Class variable to store the singleton instance
    _instance: ClassVar[Any] = None

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for a fresh ``httpx.AsyncClient``."""
        return {
            "verify": self.verify_ssl,
            "timeout": self.timeout,
            "limits": httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=self.max_keepalive_connections,
            ),
        }


# Create a singleton instance
settings = FetchCallSettings()
# Store the instance in the class variable for singleton pattern
FetchCallSettings._instance = settings
