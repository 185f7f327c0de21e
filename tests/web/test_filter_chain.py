# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for WebFilterChainMiddleware — ordering, short-circuit, conditional skip."""

from __future__ import annotations

from typing import Any

import pytest
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Mount, Route
from starlette.testclient import TestClient

from corsflow.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from corsflow.web.filters import OncePerRequestFilter

# ---------------------------------------------------------------------------
# Test filters
# ---------------------------------------------------------------------------


class RecordingFilter(OncePerRequestFilter):
    """Appends its name to X-Trace on the way out."""

    def __init__(self, name: str) -> None:
        self.name = name

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers.append("X-Trace", self.name)
        return response


class OuterFilter(RecordingFilter):
    pass


class InnerFilter(RecordingFilter):
    pass


class ShortCircuitFilter(OncePerRequestFilter):
    """Returns 429 without calling next — simulates rate limiting."""

    async def do_filter(self, request, call_next):
        return JSONResponse({"error": "rate limited"}, status_code=429)


class SkippedFilter:
    """Duck-typed WebFilter that always opts out."""

    async def do_filter(self, request, call_next):
        raise AssertionError("should have been skipped")

    def should_not_filter(self, request: Any) -> bool:
        return True


class CountingFilter(OncePerRequestFilter):
    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers.append("X-Count", "1")
        return response


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _ok_handler(request: Request) -> PlainTextResponse:
    return PlainTextResponse("OK", headers={"X-Handler": "yes"})


def _make_app(*filters) -> Starlette:
    return Starlette(
        routes=[Route("/test", _ok_handler)],
        middleware=[Middleware(WebFilterChainMiddleware, filters=list(filters))],
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestFilterChainOrdering:
    def test_first_filter_is_outermost(self):
        client = TestClient(_make_app(OuterFilter("outer"), InnerFilter("inner")))
        resp = client.get("/test")

        assert resp.status_code == 200
        assert resp.headers.get_list("X-Trace") == ["inner", "outer"]

    def test_downstream_response_is_preserved(self):
        client = TestClient(_make_app(OuterFilter("outer")))
        resp = client.get("/test")

        assert resp.text == "OK"
        assert resp.headers["X-Handler"] == "yes"

    def test_filters_property_returns_copy(self):
        middleware = WebFilterChainMiddleware(_ok_handler, filters=[OuterFilter("a")])
        middleware.filters.clear()
        assert len(middleware.filters) == 1


class TestFilterChainShortCircuit:
    def test_short_circuit_skips_downstream(self):
        client = TestClient(_make_app(OuterFilter("outer"), ShortCircuitFilter(), InnerFilter("inner")))
        resp = client.get("/test")

        assert resp.status_code == 429
        assert resp.json() == {"error": "rate limited"}
        assert resp.headers.get_list("X-Trace") == ["outer"]


class TestFilterChainConditionalSkip:
    def test_should_not_filter_skips_stage(self):
        client = TestClient(_make_app(SkippedFilter(), OuterFilter("outer")))
        resp = client.get("/test")

        assert resp.status_code == 200
        assert resp.headers.get_list("X-Trace") == ["outer"]


class TestOncePerRequest:
    def test_nested_chain_runs_filter_once(self):
        inner_app = Starlette(
            routes=[Route("/x", _ok_handler)],
            middleware=[Middleware(WebFilterChainMiddleware, filters=[CountingFilter()])],
        )
        outer_app = Starlette(
            routes=[Mount("/sub", app=inner_app)],
            middleware=[Middleware(WebFilterChainMiddleware, filters=[CountingFilter()])],
        )
        resp = TestClient(outer_app).get("/sub/x")

        assert resp.status_code == 200
        assert resp.headers.get_list("X-Count") == ["1"]

    def test_fresh_for_each_request(self):
        client = TestClient(_make_app(CountingFilter()))
        assert client.get("/test").headers.get_list("X-Count") == ["1"]
        assert client.get("/test").headers.get_list("X-Count") == ["1"]


class TestNonHttpScopes:
    def test_lifespan_passes_through(self):
        app = _make_app(ShortCircuitFilter())
        with TestClient(app) as client:
            assert client.get("/test").status_code == 429

    @pytest.mark.asyncio
    async def test_websocket_scope_bypasses_filters(self):
        seen: list[str] = []

        async def downstream(scope, receive, send):
            seen.append(scope["type"])

        middleware = WebFilterChainMiddleware(downstream, filters=[ShortCircuitFilter()])
        await middleware({"type": "websocket"}, None, None)  # type: ignore[arg-type]
        assert seen == ["websocket"]
