# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Callable

import httpx
import pytest

from fetchcall import HTTPXTransport


class MockServer:
    """Records every request a handler answers."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def transport(self, **kwargs) -> HTTPXTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return HTTPXTransport(client=client, **kwargs)


@pytest.fixture
def serve():
    """Factory: ``server = serve(handler)``; build with ``server.transport()``."""
    return MockServer


@pytest.fixture
def ok_text():
    """A server that answers every request with ``200 OK`` text."""
    return MockServer(lambda request: httpx.Response(200, text="OK"))


@pytest.fixture
def echo():
    """A server that answers with the request body as text."""
    return MockServer(lambda request: httpx.Response(200, content=request.content))
