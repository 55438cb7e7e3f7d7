"""
Target records.

The remote service stores every target in one table with two id columns:
action and skillset targets use `kpi_id` (requirement_id = 0), requirement
targets use `requirement_id` (kpi_id = 0).
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mentortrack.schemas.catalog import MetricKind


class TargetEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kpi_id: int = 0
    requirement_id: int = 0
    target_count: int = Field(ge=0)

    def matches(self, kind: MetricKind, absolute_id: int) -> bool:
        if kind == MetricKind.requirement:
            return self.requirement_id == absolute_id and self.kpi_id == 0
        return self.kpi_id == absolute_id and self.requirement_id == 0


class TargetSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    agent_id: int
    week: int
    entries: list[TargetEntry] = Field(default_factory=list)

    def count_for(self, kind: MetricKind, absolute_id: int) -> int:
        """Target for a remote metric id; 0 when unset. Later records win."""
        found = 0
        for entry in self.entries:
            if entry.matches(kind, absolute_id):
                found = entry.target_count
        return found


class TargetUpdate(BaseModel):
    """One target write, already translated to the remote id space."""
    model_config = ConfigDict(frozen=True)

    mentor_id: int
    agent_id: int
    week: int
    kind: MetricKind
    absolute_id: int
    target_count: int = Field(ge=0)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "mentor_id": self.mentor_id,
            "sales_id": self.agent_id,
            "week_number": self.week,
            "target_count": self.target_count,
        }
        if self.kind == MetricKind.requirement:
            payload["requirement_id"] = self.absolute_id
        else:
            payload["kpi_id"] = self.absolute_id
        return payload

    def to_entry(self) -> TargetEntry:
        if self.kind == MetricKind.requirement:
            return TargetEntry(requirement_id=self.absolute_id, target_count=self.target_count)
        return TargetEntry(kpi_id=self.absolute_id, target_count=self.target_count)
