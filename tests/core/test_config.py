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
"""Tests for configuration access, env overrides and dataclass binding."""

from dataclasses import dataclass, field

import pytest

from corsflow.core.config import Config, config_properties
from corsflow.kernel.exceptions import ConfigurationException


class TestConfig:
    def test_load_from_dict(self):
        config = Config({"app": {"name": "test-service", "port": 8080}})
        assert config.get("app.name") == "test-service"
        assert config.get("app.port") == 8080

    def test_get_with_default(self):
        config = Config({})
        assert config.get("missing.key", "default") == "default"

    def test_get_nested_value(self):
        config = Config({"corsflow": {"cors": {"maxAge": 10}}})
        assert config.get("corsflow.cors.maxAge") == 10

    def test_false_values_are_returned(self):
        config = Config({"corsflow": {"cors": {"credentials": False}}})
        assert config.get("corsflow.cors.credentials", True) is False

    def test_walk_through_scalar_returns_default(self):
        config = Config({"corsflow": "flat"})
        assert config.get("corsflow.cors", "x") == "x"

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("CORSFLOW_CORS_MAX_AGE", "120")
        config = Config({"corsflow": {"cors": {"max_age": 60}}})
        assert config.get("corsflow.cors.max_age") == "120"

    def test_env_key(self):
        assert Config.env_key("corsflow.cors.max_age") == "CORSFLOW_CORS_MAX_AGE"
        assert Config.env_key("app.some-key") == "CORSFLOW_APP_SOME_KEY"

    def test_get_section(self):
        config = Config({"corsflow": {"cors": {"maxAge": 1}}})
        assert config.get_section("corsflow.cors") == {"maxAge": 1}
        assert config.get_section("corsflow.missing") == {}

    def test_to_dict_is_copy(self):
        config = Config({"a": 1})
        config.to_dict()["a"] = 2
        assert config.get("a") == 1


@config_properties(prefix="corsflow.sample")
@dataclass
class SampleProperties:
    max_age: int = 5
    enabled: bool = False
    names: list[str] = field(default_factory=list)


class TestConfigBind:
    def test_bind_uses_defaults(self):
        props = Config({}).bind(SampleProperties)
        assert props == SampleProperties()

    def test_bind_snake_case_keys(self):
        config = Config({"corsflow": {"sample": {"max_age": 20, "names": ["a"]}}})
        props = config.bind(SampleProperties)
        assert props.max_age == 20
        assert props.names == ["a"]

    def test_bind_camel_case_keys(self):
        config = Config({"corsflow": {"sample": {"maxAge": 30}}})
        assert config.bind(SampleProperties).max_age == 30

    def test_bind_coerces_strings(self):
        config = Config({"corsflow": {"sample": {"max_age": "40", "enabled": "yes"}}})
        props = config.bind(SampleProperties)
        assert props.max_age == 40
        assert props.enabled is True

    def test_env_overrides_bound_field(self, monkeypatch):
        monkeypatch.setenv("CORSFLOW_SAMPLE_MAX_AGE", "99")
        config = Config({"corsflow": {"sample": {"max_age": 20}}})
        assert config.bind(SampleProperties).max_age == 99

    def test_bad_int_raises(self):
        config = Config({"corsflow": {"sample": {"max_age": "soon"}}})
        with pytest.raises(ConfigurationException) as exc_info:
            config.bind(SampleProperties)
        assert exc_info.value.code == "CONFIG_TYPE_MISMATCH"

    def test_undecorated_class_raises(self):
        @dataclass
        class Plain:
            x: int = 1

        with pytest.raises(ConfigurationException):
            Config({}).bind(Plain)
