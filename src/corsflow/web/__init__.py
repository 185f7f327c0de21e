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
"""corsflow web — CORS policy engine and its pipeline integration.

Framework-agnostic types (policy, rules, pipeline, filter protocol) are
exported directly. Default adapter (Starlette) exports are re-exported for
convenience.
"""

# Framework-agnostic exports
# Default adapter (Starlette) re-exports
from corsflow.web.adapters.starlette import (
    CorsFilter,
    RoutingFilter,
    WebFilterChainMiddleware,
    build_middleware,
    create_app,
    install_cors,
)
from corsflow.web.cors import (
    CORS_HEADERS,
    CorsPolicy,
    HeaderRule,
    OriginRule,
    RuleKind,
    apply_cors_headers,
    apply_headers,
    finalize_preflight,
    is_preflight,
    resolve_allowed_origin,
)
from corsflow.web.filters import OncePerRequestFilter
from corsflow.web.pipeline import FilterPipeline
from corsflow.web.ports.filter import CallNext, WebFilter

__all__ = [
    # Framework-agnostic
    "CORS_HEADERS",
    "CallNext",
    "CorsPolicy",
    "FilterPipeline",
    "HeaderRule",
    "OncePerRequestFilter",
    "OriginRule",
    "RuleKind",
    "WebFilter",
    "apply_cors_headers",
    "apply_headers",
    "finalize_preflight",
    "is_preflight",
    "resolve_allowed_origin",
    # Default adapter (Starlette)
    "CorsFilter",
    "RoutingFilter",
    "WebFilterChainMiddleware",
    "build_middleware",
    "create_app",
    "install_cors",
]
