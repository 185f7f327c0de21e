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
"""OncePerRequestFilter — base class for WebFilter that runs at most once per request.

Framework-agnostic: marks the request through ``request.state`` via the
attribute protocol, so no Starlette import is needed.
"""

from __future__ import annotations

import abc
from typing import Any

from corsflow.web.ports.filter import CallNext


class OncePerRequestFilter(abc.ABC):
    """Abstract base class for :class:`WebFilter` implementations.

    A filter class that appears in nested filter chains (e.g. a mounted
    sub-application with its own pipeline) only executes for the outermost
    chain; inner chains skip it. Subclasses only need to implement
    ``do_filter()``.
    """

    @property
    def already_filtered_attribute(self) -> str:
        return f"corsflow_filtered_{type(self).__qualname__}"

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` if this filter class already ran for the request."""
        attribute = self.already_filtered_attribute
        if getattr(request.state, attribute, False):
            return True
        setattr(request.state, attribute, True)
        return False

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Execute the filter logic.  Must call ``await call_next(request)`` to proceed."""
        ...
