"""
Metric catalog: the static lists of action KPIs, skillset KPIs and
requirements a mentor can set targets for.

Entries are addressed by their zero-based position inside their kind's
list; see services/metric_ids.py for the mapping to remote ids.
"""
from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field

from mentortrack.core.errors import UnknownMetricError


class MetricKind(str, enum.Enum):
    action = "action"
    skillset = "skillset"
    requirement = "requirement"


class MetricCatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: MetricKind
    name: str
    position: int = Field(ge=0, description="Zero-based index within the kind's list.")


class Catalog(BaseModel):
    """The three catalog lists, loaded once per session."""
    model_config = ConfigDict(frozen=True)

    actions: list[MetricCatalogEntry] = Field(default_factory=list)
    skillsets: list[MetricCatalogEntry] = Field(default_factory=list)
    requirements: list[MetricCatalogEntry] = Field(default_factory=list)

    @classmethod
    def from_names(
        cls,
        actions: list[str],
        skillsets: list[str],
        requirements: list[str],
    ) -> "Catalog":
        def _entries(kind: MetricKind, names: list[str]) -> list[MetricCatalogEntry]:
            return [
                MetricCatalogEntry(kind=kind, name=name, position=i)
                for i, name in enumerate(names)
            ]

        return cls(
            actions=_entries(MetricKind.action, actions),
            skillsets=_entries(MetricKind.skillset, skillsets),
            requirements=_entries(MetricKind.requirement, requirements),
        )

    def entries(self, kind: MetricKind) -> list[MetricCatalogEntry]:
        if kind == MetricKind.action:
            return self.actions
        if kind == MetricKind.skillset:
            return self.skillsets
        return self.requirements

    def size(self, kind: MetricKind) -> int:
        return len(self.entries(kind))

    def entry(self, kind: MetricKind, position: int) -> MetricCatalogEntry:
        items = self.entries(kind)
        if position < 0 or position >= len(items):
            raise UnknownMetricError(kind.value, position)
        return items[position]
