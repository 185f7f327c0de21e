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
"""CORS configuration properties bound from the ``corsflow.cors`` section."""

from __future__ import annotations

from dataclasses import dataclass, field

from corsflow.core.config import config_properties
from corsflow.web.cors import CorsPolicy


@config_properties(prefix="corsflow.cors")
@dataclass
class CorsProperties:
    """Configuration for the CORS filter (corsflow.cors.*).

    Field values use the raw configuration shapes; :meth:`to_policy`
    validates them into an immutable :class:`CorsPolicy`.
    """

    allow_origin: str | list[str] = field(default_factory=lambda: ["*"])
    allow_methods: list[str] = field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    allow_headers: bool | list[str] = True
    expose_headers: bool | list[str] = False
    max_age: int = 3600
    credentials: bool = False
    short_circuit_preflight: bool = False

    def to_policy(self) -> CorsPolicy:
        return CorsPolicy.from_mapping(
            {
                "allow_origin": self.allow_origin,
                "allow_methods": self.allow_methods,
                "allow_headers": self.allow_headers,
                "expose_headers": self.expose_headers,
                "max_age": self.max_age,
                "credentials": self.credentials,
            }
        )
