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
"""Tests for the LoggingPort protocol."""

from typing import Any

from corsflow.core.config import Config
from corsflow.logging.port import LoggingPort


class _InMemoryLogging:
    def __init__(self) -> None:
        self.levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        self.levels["root"] = str(config.get("corsflow.logging.level.root", "INFO"))

    def get_logger(self, name: str) -> Any:
        return name

    def set_level(self, name: str, level: str) -> None:
        self.levels[name] = level


class TestLoggingPort:
    def test_duck_typed_adapter_conforms(self):
        assert isinstance(_InMemoryLogging(), LoggingPort)

    def test_missing_method_does_not_conform(self):
        class _Partial:
            def configure(self, config: Config) -> None: ...

        assert not isinstance(_Partial(), LoggingPort)
