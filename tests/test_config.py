# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import httpx
import pytest
from pydantic import ValidationError

from fetchcall import FetchCallSettings, settings


class TestFetchCallSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FOLLOW_REDIRECTS", "TIMEOUT", "VERIFY_SSL"):
            monkeypatch.delenv(f"FETCHCALL_{name}", raising=False)

        config = FetchCallSettings(_env_file=None)

        assert config.follow_redirects is True
        assert config.timeout == 30.0
        assert config.verify_ssl is True
        assert config.max_connections == 100

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("FETCHCALL_FOLLOW_REDIRECTS", "false")
        monkeypatch.setenv("FETCHCALL_TIMEOUT", "2.5")

        config = FetchCallSettings(_env_file=None)

        assert config.follow_redirects is False
        assert config.timeout == 2.5

    def test_frozen(self):
        with pytest.raises(ValidationError):
            settings.timeout = 1.0

    def test_singleton_instance(self):
        assert FetchCallSettings._instance is settings

    def test_client_kwargs(self):
        config = FetchCallSettings(
            _env_file=None, timeout=5.0, verify_ssl=False, max_connections=3
        )
        kwargs = config.client_kwargs()

        assert kwargs["timeout"] == 5.0
        assert kwargs["verify"] is False
        assert isinstance(kwargs["limits"], httpx.Limits)
        assert kwargs["limits"].max_connections == 3
