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
"""Configuration access over an already-resolved mapping, with env overrides and dataclass binding.

Loading and merging configuration files is left to the host application;
``Config`` only wraps the resulting nested dict.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any, TypeVar, get_type_hints

from corsflow.kernel.exceptions import ConfigurationException

T = TypeVar("T")

_CONFIG_PROPERTIES_ATTR = "__corsflow_config_prefix__"
_ENV_PREFIX = "CORSFLOW_"


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Mark a dataclass as bindable to a configuration prefix.

    Usage:
        @config_properties(prefix="corsflow.cors")
        @dataclass
        class CorsProperties:
            max_age: int = 3600
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


class Config:
    """Hierarchical configuration with dot-notation access and env var overrides.

    Priority (highest wins):
    1. Environment variables (CORSFLOW_SECTION_KEY format)
    2. Configuration dict values
    3. Dataclass defaults
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the raw configuration data."""
        return dict(self._data)

    @staticmethod
    def env_key(key: str) -> str:
        """Map a dot-notation key to its environment variable name.

        ``corsflow.cors.max_age`` -> ``CORSFLOW_CORS_MAX_AGE``
        """
        base = key.removeprefix("corsflow.")
        return _ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key, checking env vars first."""
        env_val = os.environ.get(self.env_key(key))
        if env_val is not None:
            return env_val

        current: Any = self._data
        for part in key.split("."):
            if isinstance(current, dict):
                current = current.get(part)
                if current is None:
                    return default
            else:
                return default
        return current

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Get all values under a prefix as a dict."""
        current: Any = self._data
        for part in prefix.split("."):
            if isinstance(current, dict):
                current = current.get(part, {})
            else:
                return {}
        return current if isinstance(current, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Bind configuration to a @config_properties dataclass.

        Scalar fields may be overridden from the environment; string values
        are coerced to the annotated ``int`` or ``bool`` type.
        """
        prefix = getattr(config_cls, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                code="CONFIG_NOT_BINDABLE",
            )

        section = self.get_section(prefix)
        hints = get_type_hints(config_cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            value = os.environ.get(self.env_key(f"{prefix}.{field.name}"))
            if value is None:
                key = next((k for k in (field.name, _camel_case(field.name)) if k in section), None)
                if key is None:
                    continue
                value = section[key]
            expected_type = hints.get(field.name)
            if isinstance(value, str):
                try:
                    if expected_type is int:
                        value = int(value)
                    elif expected_type is bool:
                        value = value.lower() in ("true", "1", "yes")
                except ValueError as exc:
                    raise ConfigurationException(
                        f"Cannot convert '{value}' for {prefix}.{field.name} to {expected_type}",
                        code="CONFIG_TYPE_MISMATCH",
                        context={"key": f"{prefix}.{field.name}", "value": value},
                    ) from exc
            kwargs[field.name] = value

        return config_cls(**kwargs)
