"""
Progress snapshot for one (agent, week): what the agent actually did.

Skillset scores are 0–100 percentages. When a record only carries the
three sub-scores (wording, tonality, rapport) the total is their mean,
rounded half-up.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mentortrack.schemas.catalog import MetricKind


def round_half_up(value: float | Decimal) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ActionProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_id: int
    count: int = Field(ge=0)


class SkillsetProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_id: int
    total_score: int = Field(ge=0, le=100)
    wording: Optional[float] = None
    tonality: Optional[float] = None
    rapport: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def derive_total(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("total_score") is not None:
            return data
        subs = [data.get("wording"), data.get("tonality"), data.get("rapport")]
        if all(s is not None for s in subs):
            data = dict(data)
            data["total_score"] = round_half_up(sum(Decimal(str(s)) for s in subs) / 3)
        return data


class RequirementProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric_id: int
    count: int = Field(ge=0)


class Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    agent_id: int
    week: int
    actions: list[ActionProgress] = Field(default_factory=list)
    skillsets: list[SkillsetProgress] = Field(default_factory=list)
    requirements: list[RequirementProgress] = Field(default_factory=list)

    def observed(self, kind: MetricKind, metric_id: int) -> int:
        """Observed count (or score) for a remote metric id; 0 when absent.

        Repeated ids are summed for counts; skillsets keep the best score.
        """
        if kind == MetricKind.skillset:
            scores = [s.total_score for s in self.skillsets if s.metric_id == metric_id]
            return max(scores, default=0)
        rows = self.actions if kind == MetricKind.action else self.requirements
        return sum(r.count for r in rows if r.metric_id == metric_id)
