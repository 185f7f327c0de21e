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
"""CORS policy engine — origin matching, header construction, and preflight finalization.

Framework-agnostic: responses are accessed through ``response.headers`` (a
mutable mapping whose item assignment replaces any existing value) and
``response.status_code``, so no Starlette import is needed here.

Header names are declared in their canonical casing; ASGI servers carry them
lowercased on the wire.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from corsflow.kernel.exceptions import PolicyConfigurationException

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
MAX_AGE = "Access-Control-Max-Age"

CORS_HEADERS: tuple[str, ...] = (
    ALLOW_ORIGIN,
    ALLOW_METHODS,
    ALLOW_HEADERS,
    EXPOSE_HEADERS,
    ALLOW_CREDENTIALS,
    MAX_AGE,
)

WILDCARD = "*"
PREFLIGHT_METHOD = "OPTIONS"

DEFAULT_ALLOW_METHODS: tuple[str, ...] = ("GET", "POST", "OPTIONS")
DEFAULT_MAX_AGE = 3600

# Configuration keys as delivered by the external loader, with snake_case aliases.
_FIELD_KEYS: dict[str, tuple[str, str]] = {
    "allow_origin": ("allowOrigin", "allow_origin"),
    "allow_methods": ("allowMethods", "allow_methods"),
    "allow_headers": ("allowHeaders", "allow_headers"),
    "expose_headers": ("exposeHeaders", "expose_headers"),
    "max_age": ("maxAge", "max_age"),
    "credentials": ("credentials", "credentials"),
}


class RuleKind(enum.Enum):
    """Tag of a dual-typed policy field."""

    WILDCARD = "wildcard"
    DENY = "deny"
    LIST = "list"


def _string_items(raw: Any, field_name: str) -> tuple[str, ...]:
    """Normalize a list-or-comma-string config value into a tuple of tokens."""
    if isinstance(raw, str):
        return tuple(part.strip() for part in raw.split(",") if part.strip())
    if isinstance(raw, Iterable) and not isinstance(raw, Mapping):
        items = tuple(raw)
        for item in items:
            if not isinstance(item, str):
                raise PolicyConfigurationException(
                    f"'{field_name}' entries must be strings, got {type(item).__name__}",
                    code="CORS_CONFIG_ITEM_TYPE",
                    context={"field": field_name, "value": item},
                )
        return items
    raise PolicyConfigurationException(
        f"'{field_name}' must be a list of strings, got {type(raw).__name__}",
        code="CORS_CONFIG_LIST_TYPE",
        context={"field": field_name, "value": raw},
    )


@dataclass(frozen=True)
class HeaderRule:
    """Value of ``allowHeaders`` / ``exposeHeaders``: allow-all, deny-all, or an explicit list."""

    kind: RuleKind
    values: tuple[str, ...] = ()

    @classmethod
    def wildcard(cls) -> HeaderRule:
        return cls(RuleKind.WILDCARD)

    @classmethod
    def deny(cls) -> HeaderRule:
        return cls(RuleKind.DENY)

    @classmethod
    def of(cls, *values: str) -> HeaderRule:
        return cls(RuleKind.LIST, tuple(values))

    @classmethod
    def parse(cls, raw: Any, field_name: str = "headers") -> HeaderRule:
        """Build a rule from ``true`` | ``false`` | list of header names.

        Strings (as read from environment variables) are accepted: ``"true"``
        and ``"*"`` mean allow-all, ``"false"`` means deny-all, anything else
        is split on commas.
        """
        if isinstance(raw, HeaderRule):
            return raw
        if raw is True:
            return cls.wildcard()
        if raw is False:
            return cls.deny()
        if isinstance(raw, str):
            lowered = raw.strip().lower()
            if lowered in ("true", WILDCARD):
                return cls.wildcard()
            if lowered == "false":
                return cls.deny()
        return cls(RuleKind.LIST, _string_items(raw, field_name))

    def render(self) -> str:
        """Header value: ``*`` for wildcard, empty for deny or an empty list."""
        if self.kind is RuleKind.WILDCARD:
            return WILDCARD
        if self.kind is RuleKind.DENY:
            return ""
        return ",".join(self.values)


@dataclass(frozen=True)
class OriginRule:
    """Value of ``allowOrigin``: the wildcard flag or an allow-list of origins.

    A list that itself contains ``"*"`` is *not* the wildcard flag: it echoes
    the request origin instead of answering with a literal ``*``.
    """

    kind: RuleKind
    origins: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is RuleKind.DENY:
            raise PolicyConfigurationException(
                "allowOrigin has no deny form; use an empty list",
                code="CORS_CONFIG_ORIGIN_KIND",
            )

    @classmethod
    def any(cls) -> OriginRule:
        return cls(RuleKind.WILDCARD)

    @classmethod
    def of(cls, *origins: str) -> OriginRule:
        return cls(RuleKind.LIST, tuple(origins))

    @classmethod
    def parse(cls, raw: Any) -> OriginRule:
        """Build a rule from ``"*"`` or a list (or comma-separated string) of origins."""
        if isinstance(raw, OriginRule):
            return raw
        if isinstance(raw, str) and raw.strip() == WILDCARD:
            return cls.any()
        if isinstance(raw, bool):
            raise PolicyConfigurationException(
                "'allowOrigin' must be \"*\" or a list of origins",
                code="CORS_CONFIG_LIST_TYPE",
                context={"field": "allowOrigin", "value": raw},
            )
        return cls(RuleKind.LIST, _string_items(raw, "allowOrigin"))

    @property
    def is_wildcard(self) -> bool:
        """True for the wildcard flag or a list containing ``"*"``."""
        return self.kind is RuleKind.WILDCARD or WILDCARD in self.origins


@dataclass(frozen=True)
class CorsPolicy:
    """Immutable, process-wide CORS policy.

    Built once at startup and shared read-only by every request. Any field
    left out falls back to its default.
    """

    allow_origin: OriginRule = field(default_factory=lambda: OriginRule.of(WILDCARD))
    allow_methods: tuple[str, ...] = DEFAULT_ALLOW_METHODS
    allow_headers: HeaderRule = field(default_factory=HeaderRule.wildcard)
    expose_headers: HeaderRule = field(default_factory=HeaderRule.deny)
    max_age: int = DEFAULT_MAX_AGE
    credentials: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "allow_origin", OriginRule.parse(self.allow_origin))
        object.__setattr__(self, "allow_methods", _string_items(self.allow_methods, "allowMethods"))
        object.__setattr__(self, "allow_headers", HeaderRule.parse(self.allow_headers, "allowHeaders"))
        object.__setattr__(self, "expose_headers", HeaderRule.parse(self.expose_headers, "exposeHeaders"))
        if isinstance(self.max_age, bool) or not isinstance(self.max_age, int):
            raise PolicyConfigurationException(
                f"'maxAge' must be an integer number of seconds, got {self.max_age!r}",
                code="CORS_CONFIG_MAX_AGE",
                context={"field": "maxAge", "value": self.max_age},
            )
        if self.max_age < 0:
            raise PolicyConfigurationException(
                f"'maxAge' must not be negative, got {self.max_age}",
                code="CORS_CONFIG_MAX_AGE",
                context={"field": "maxAge", "value": self.max_age},
            )
        if not isinstance(self.credentials, bool):
            raise PolicyConfigurationException(
                f"'credentials' must be a boolean, got {self.credentials!r}",
                code="CORS_CONFIG_CREDENTIALS",
                context={"field": "credentials", "value": self.credentials},
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CorsPolicy:
        """Build a policy from a resolved configuration mapping.

        Recognizes ``allowOrigin``, ``allowMethods``, ``allowHeaders``,
        ``exposeHeaders``, ``maxAge`` and ``credentials`` (or their
        snake_case spellings). Unknown keys are ignored; ``None`` counts as
        absent.
        """
        raw: dict[str, Any] = {}
        for name, keys in _FIELD_KEYS.items():
            for key in keys:
                if data.get(key) is not None:
                    raw[name] = data[key]
                    break

        max_age = raw.get("max_age")
        if isinstance(max_age, str) and max_age.strip().isdigit():
            raw["max_age"] = int(max_age)
        return cls(**raw)

    @property
    def wildcard_with_credentials(self) -> bool:
        """True when a wildcard origin is combined with credentials, which browsers reject."""
        return self.credentials and self.allow_origin.is_wildcard


def resolve_allowed_origin(
    request_origin: str | None,
    allow_origin: OriginRule,
    credentials: bool = False,
) -> str:
    """Return the ``Access-Control-Allow-Origin`` value for a request origin.

    The wildcard flag answers ``*``, or echoes the origin when credentials are
    allowed. An allow-list echoes the origin if it is listed (or the list
    contains ``*``) and otherwise yields ``""``, which keeps the header present
    but grants nothing. A missing origin is treated as ``""``.
    """
    origin = request_origin or ""
    if allow_origin.kind is RuleKind.WILDCARD:
        return origin if credentials else WILDCARD
    if WILDCARD in allow_origin.origins or origin in allow_origin.origins:
        return origin
    return ""


def apply_headers(response: Any, policy: CorsPolicy) -> Any:
    """Write the five non-origin CORS headers onto *response*.

    Every header is always written, possibly with an empty value. Writes
    replace, so applying twice leaves the same values as applying once.
    """
    headers = response.headers
    headers[ALLOW_METHODS] = ",".join(policy.allow_methods)
    headers[ALLOW_HEADERS] = policy.allow_headers.render()
    headers[EXPOSE_HEADERS] = policy.expose_headers.render()
    headers[ALLOW_CREDENTIALS] = "true" if policy.credentials else "false"
    headers[MAX_AGE] = str(policy.max_age)
    return response


def apply_cors_headers(response: Any, policy: CorsPolicy, request_origin: str | None) -> Any:
    """Write all six CORS headers: the resolved origin plus :func:`apply_headers`."""
    response.headers[ALLOW_ORIGIN] = resolve_allowed_origin(
        request_origin, policy.allow_origin, policy.credentials
    )
    return apply_headers(response, policy)


def is_preflight(method: str) -> bool:
    """Exact, case-sensitive match on the ``OPTIONS`` method token."""
    return method == PREFLIGHT_METHOD


def finalize_preflight(response: Any) -> Any:
    """Force a preflight response to status 200, leaving its headers untouched."""
    response.status_code = 200
    return response
