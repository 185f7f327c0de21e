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
"""corsflow exception hierarchy.

Every error raised by corsflow derives from :class:`CorsFlowException`, which
carries an optional machine-readable code and a context dict. Origin
mismatches and missing configuration fields are *not* errors and never raise.
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class CorsFlowException(Exception):
    """Base exception for all corsflow errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CORS_CONFIG_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(CorsFlowException):
    """Configuration could not be read or bound."""


class PolicyConfigurationException(ConfigurationException):
    """A CORS policy field is present but holds a value of the wrong shape."""


# =============================================================================
# Pipeline Exceptions
# =============================================================================


class PipelineException(CorsFlowException):
    """Errors while assembling the filter pipeline."""


class StageNotFoundException(PipelineException):
    """The anchor stage for a relative insertion is not in the pipeline."""
