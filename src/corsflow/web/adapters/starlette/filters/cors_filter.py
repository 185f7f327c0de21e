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
"""CORS filter — overlays policy-driven CORS headers on every response."""

from __future__ import annotations

from typing import Any

import structlog
from starlette.requests import Request
from starlette.responses import Response

from corsflow.web.cors import (
    CorsPolicy,
    apply_cors_headers,
    finalize_preflight,
    is_preflight,
)
from corsflow.web.filters import OncePerRequestFilter
from corsflow.web.ports.filter import CallNext

logger = structlog.get_logger("corsflow.web")


class CorsFilter(OncePerRequestFilter):
    """Applies a :class:`CorsPolicy` to every response passing through the pipeline.

    The downstream stage always runs first, preflight requests included, and
    its response is then decorated with all six CORS headers. ``OPTIONS``
    responses are forced to status 200 whatever the downstream produced.

    With ``short_circuit_preflight=True`` an ``OPTIONS`` request is answered
    directly with an empty 200 response and never reaches downstream stages.
    """

    def __init__(self, policy: CorsPolicy | None = None, short_circuit_preflight: bool = False) -> None:
        self._policy = policy or CorsPolicy()
        self._short_circuit_preflight = short_circuit_preflight
        if self._policy.wildcard_with_credentials:
            logger.warning(
                "cors_wildcard_with_credentials",
                allow_origin=self._policy.allow_origin.kind.value,
                detail="browsers reject a wildcard origin on credentialed requests",
            )

    @property
    def policy(self) -> CorsPolicy:
        return self._policy

    @property
    def short_circuit_preflight(self) -> bool:
        return self._short_circuit_preflight

    def is_cors_applicable(self, request: Any) -> bool:
        """Hook for restricting CORS to some requests; applies to all of them."""
        return True

    def should_not_filter(self, request: Any) -> bool:
        return super().should_not_filter(request) or not self.is_cors_applicable(request)

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        preflight = is_preflight(request.method)
        if preflight and self._short_circuit_preflight:
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        origin = request.headers.get("origin", "")
        apply_cors_headers(response, self._policy, origin)

        if preflight:
            downstream_status = response.status_code
            finalize_preflight(response)
            logger.debug(
                "cors_preflight_finalized",
                path=request.url.path,
                origin=origin,
                downstream_status=downstream_status,
            )
        else:
            logger.debug(
                "cors_headers_applied",
                method=request.method,
                path=request.url.path,
                origin=origin,
            )
        return response
