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
"""Routing boundary filter — answers 404 for paths no route can serve."""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import BaseRoute, Match
from starlette.types import Scope

from corsflow.web.filters import OncePerRequestFilter
from corsflow.web.ports.filter import CallNext

logger = structlog.get_logger("corsflow.web")


class RoutingFilter(OncePerRequestFilter):
    """Marks where route dispatch begins in a :class:`FilterPipeline`.

    Resolves the request against the route table (the application's router
    unless ``routes`` is given). Unknown paths get a 404 without calling the
    stages placed after this one; a path that matches with the wrong method
    continues so the router can answer 405. When the application's router
    redirects slashes, a path whose trailing-slash variant matches also
    continues so the router can answer its redirect.
    """

    def __init__(self, routes: Sequence[BaseRoute] | None = None) -> None:
        self._routes = list(routes) if routes is not None else None

    def _route_table(self, request: Request) -> Sequence[BaseRoute]:
        if self._routes is not None:
            return self._routes
        return request.app.router.routes

    @staticmethod
    def _matches(routes: Sequence[BaseRoute], scope: Scope) -> bool:
        return any(route.matches(scope)[0] is not Match.NONE for route in routes)

    @staticmethod
    def _redirect_slashes(request: Request) -> bool:
        router = getattr(request.scope.get("app"), "router", None)
        return bool(getattr(router, "redirect_slashes", False))

    def _slash_variant_matches(self, request: Request, routes: Sequence[BaseRoute]) -> bool:
        path = request.scope["path"]
        if path == "/" or not self._redirect_slashes(request):
            return False
        redirect_scope = dict(request.scope)
        redirect_scope["path"] = path.rstrip("/") if path.endswith("/") else path + "/"
        return self._matches(routes, redirect_scope)

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        routes = self._route_table(request)
        if self._matches(routes, request.scope) or self._slash_variant_matches(request, routes):
            return await call_next(request)

        logger.debug("route_not_found", method=request.method, path=request.url.path)
        return PlainTextResponse("Not Found", status_code=404)
