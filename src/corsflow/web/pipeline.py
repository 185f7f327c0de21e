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
"""FilterPipeline — explicit, ordered list of WebFilter stages.

Stages run in list order: the first stage sees the request first and the
response last. Relative insertion (``insert_before``) is expressed against a
stage *type*, so callers can position a stage without holding a reference to
the anchor instance.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from corsflow.kernel.exceptions import PipelineException, StageNotFoundException
from corsflow.web.ports.filter import WebFilter

logger = structlog.get_logger("corsflow.web.pipeline")


class FilterPipeline:
    """Ordered collection of :class:`WebFilter` stages."""

    def __init__(self, filters: Iterable[WebFilter] = ()) -> None:
        self._filters: list[WebFilter] = []
        for stage in filters:
            self.add(stage)

    @property
    def filters(self) -> list[WebFilter]:
        """A copy of the stages, in execution order."""
        return list(self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[WebFilter]:
        return iter(list(self._filters))

    def index_of(self, stage_type: type) -> int:
        """Position of the first stage that is an instance of *stage_type*."""
        for index, stage in enumerate(self._filters):
            if isinstance(stage, stage_type):
                return index
        raise StageNotFoundException(
            f"No {stage_type.__name__} stage in the pipeline",
            code="PIPELINE_STAGE_NOT_FOUND",
            context={"anchor": stage_type.__name__, "stages": [type(s).__name__ for s in self._filters]},
        )

    def add(self, stage: WebFilter) -> FilterPipeline:
        """Append *stage* at the end of the pipeline."""
        self._check(stage)
        self._filters.append(stage)
        return self

    def insert_before(self, anchor: type, stage: WebFilter) -> FilterPipeline:
        """Insert *stage* just before the first *anchor* stage.

        Raises:
            StageNotFoundException: no stage of type *anchor* is present.
        """
        self._check(stage)
        self._filters.insert(self.index_of(anchor), stage)
        return self

    def insert_before_or_append(self, anchor: type, stage: WebFilter) -> FilterPipeline:
        """Insert *stage* before *anchor*, or append it when *anchor* is absent."""
        try:
            return self.insert_before(anchor, stage)
        except StageNotFoundException:
            logger.info(
                "pipeline_stage_appended",
                stage=type(stage).__name__,
                missing_anchor=anchor.__name__,
            )
            return self.add(stage)

    @staticmethod
    def _check(stage: object) -> None:
        if not isinstance(stage, WebFilter):
            raise PipelineException(
                f"{type(stage).__name__} does not implement WebFilter",
                code="PIPELINE_INVALID_STAGE",
            )
