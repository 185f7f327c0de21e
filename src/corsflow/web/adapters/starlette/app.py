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
"""corsflow application factory and CORS installation on Starlette."""

from __future__ import annotations

from collections.abc import Sequence
from typing import cast

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from corsflow.config.properties.cors import CorsProperties
from corsflow.core.config import Config
from corsflow.kernel.exceptions import StageNotFoundException
from corsflow.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from corsflow.web.adapters.starlette.filters import CorsFilter, RoutingFilter
from corsflow.web.cors import CorsPolicy
from corsflow.web.pipeline import FilterPipeline


def install_cors(
    pipeline: FilterPipeline,
    policy: CorsPolicy | None = None,
    short_circuit_preflight: bool = False,
) -> CorsFilter:
    """Register a :class:`CorsFilter` ahead of the routing boundary.

    CORS must see every response, including 404s for unknown routes, so it is
    placed before the :class:`RoutingFilter`. A pipeline without one gets the
    filter appended instead; the stage is never dropped.
    """
    cors_filter = CorsFilter(policy, short_circuit_preflight=short_circuit_preflight)
    pipeline.insert_before_or_append(RoutingFilter, cors_filter)
    return cors_filter


def build_middleware(pipeline: FilterPipeline) -> Middleware:
    """Wrap the pipeline's stages in a single ``WebFilterChainMiddleware`` entry."""
    return Middleware(WebFilterChainMiddleware, filters=pipeline.filters)


def create_app(
    policy: CorsPolicy | None = None,
    routes: Sequence[BaseRoute] | None = None,
    pipeline: FilterPipeline | None = None,
    config: Config | None = None,
    short_circuit_preflight: bool | None = None,
    debug: bool = False,
    lifespan: object | None = None,
) -> Starlette:
    """Create a Starlette application whose responses carry CORS headers.

    The policy comes from ``policy`` when given, else from the
    ``corsflow.cors`` section of ``config``, else the defaults. Without an
    explicit ``pipeline`` a default one holding a :class:`RoutingFilter` is
    created; the CORS filter is then installed via :func:`install_cors`.

    A supplied pipeline that already holds a :class:`CorsFilter` is left as
    is, and that filter's policy is the one recorded on ``app.state``.
    """
    props = config.bind(CorsProperties) if config is not None else CorsProperties()
    if policy is None:
        policy = props.to_policy() if config is not None else CorsPolicy()
    if short_circuit_preflight is None:
        short_circuit_preflight = props.short_circuit_preflight

    if pipeline is None:
        pipeline = FilterPipeline([RoutingFilter()])
    try:
        installed = pipeline.filters[pipeline.index_of(CorsFilter)]
    except StageNotFoundException:
        install_cors(pipeline, policy, short_circuit_preflight=short_circuit_preflight)
    else:
        policy = cast(CorsFilter, installed).policy

    app = Starlette(
        debug=debug,
        routes=list(routes or []),
        middleware=[build_middleware(pipeline)],
        lifespan=lifespan,  # type: ignore[arg-type]
    )

    app.state.corsflow_policy = policy
    app.state.corsflow_pipeline = pipeline
    return app
