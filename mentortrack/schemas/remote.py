"""
Wire shapes of the remote data service.

Field names mirror the hosted API (`result1`, `_user`, the
`mentorDashboard_*_masterData` lists, ...). Each response model knows how
to turn itself into the domain type the caches hold. Parsing failures are
converted to MalformedResponseError by services/remote.py.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mentortrack.schemas.agent import Agent, Roster
from mentortrack.schemas.catalog import Catalog
from mentortrack.schemas.progress import (
    ActionProgress,
    RequirementProgress,
    SkillsetProgress,
    Snapshot,
    round_half_up,
)
from mentortrack.schemas.target import TargetEntry


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------------------------------------------------------------------
# GET /mentor_dashboard_sales
# ---------------------------------------------------------------------------

class RemoteUser(_Wire):
    full_name: str = ""
    profile_image: Optional[str] = None


class RemoteRank(_Wire):
    rank_name: Optional[str] = None


class RemoteSalesUser(_Wire):
    id: int
    user_id: Optional[int] = None
    starting_date: Optional[date] = None
    generation: Optional[int] = None
    property_type: Optional[str] = None
    probation_status: Optional[str] = None
    probation_extended: bool = False
    current_rank: Optional[int] = None
    user: list[RemoteUser] = Field(default_factory=list, alias="_user")
    rank: Optional[RemoteRank] = Field(default=None, alias="_rank")

    @field_validator("starting_date", mode="before")
    @classmethod
    def date_part_only(cls, v):
        # The service sends either "2024-03-01" or a full ISO timestamp.
        if isinstance(v, str):
            return v[:10] or None
        return v

    def to_agent(self) -> Agent:
        user = self.user[0] if self.user else RemoteUser()
        return Agent(
            id=self.id,
            user_id=self.user_id,
            full_name=user.full_name,
            profile_image=user.profile_image,
            generation=self.generation,
            current_rank=self.current_rank,
            rank_name=self.rank.rank_name if self.rank else None,
            probation_status=self.probation_status or "",
            probation_extended=self.probation_extended,
            starting_date=self.starting_date,
            property_type=self.property_type,
        )


class RemoteMentor(_Wire):
    id: int
    user_id: Optional[int] = None


class RemoteRosterResponse(_Wire):
    mentor: Optional[RemoteMentor] = Field(default=None, alias="mentor1")
    sales: list[RemoteSalesUser] = Field(alias="result1")

    def to_roster(self) -> Roster:
        return Roster(
            mentor_id=self.mentor.id if self.mentor else None,
            agents=[s.to_agent() for s in self.sales],
        )


# ---------------------------------------------------------------------------
# GET /mentor_dashboard_metadata
# ---------------------------------------------------------------------------

class RemoteKpiName(_Wire):
    kpi_name: str


class RemoteRequirementName(_Wire):
    requirement_name: str


class RemoteMetadataResponse(_Wire):
    actions: list[RemoteKpiName] = Field(alias="mentorDashboard_actionKpi_masterData")
    skillsets: list[RemoteKpiName] = Field(alias="mentorDashboard_skillsetKpi_masterData")
    requirements: list[RemoteRequirementName] = Field(alias="mentorDashboard_requirement_masterData")

    def to_catalog(self) -> Catalog:
        return Catalog.from_names(
            actions=[k.kpi_name for k in self.actions],
            skillsets=[k.kpi_name for k in self.skillsets],
            requirements=[r.requirement_name for r in self.requirements],
        )


# ---------------------------------------------------------------------------
# GET /mentor_dashboard_sales_progress
# ---------------------------------------------------------------------------

class RemoteActionProgress(_Wire):
    kpi_id: int = Field(alias="kpi_action_progress_kpi_id")
    count: int = Field(default=0, alias="kpi_action_progress_count")


class RemoteSkillsetProgress(_Wire):
    kpi_id: int = Field(alias="kpi_skillset_progress_kpi_id")
    total_score: float = Field(default=0, alias="kpi_skillset_progress_total_score")


class RemoteRequirementProgress(_Wire):
    requirement_id: int = Field(alias="requirement_progress_requirement_id")
    count: int = Field(default=0, alias="requirement_progress_count")


class RemoteProgressResponse(_Wire):
    actions: list[RemoteActionProgress] = Field(default_factory=list, alias="result1")
    skillsets: list[RemoteSkillsetProgress] = Field(
        default_factory=list, alias="kpi_skillset_progress_max"
    )
    requirements: list[RemoteRequirementProgress] = Field(
        default_factory=list, alias="requirement_progress1"
    )

    def to_snapshot(self, agent_id: int, week: int) -> Snapshot:
        return Snapshot(
            agent_id=agent_id,
            week=week,
            actions=[ActionProgress(metric_id=a.kpi_id, count=a.count) for a in self.actions],
            skillsets=[
                SkillsetProgress(metric_id=s.kpi_id, total_score=round_half_up(s.total_score))
                for s in self.skillsets
            ],
            requirements=[
                RequirementProgress(metric_id=r.requirement_id, count=r.count)
                for r in self.requirements
            ],
        )


# ---------------------------------------------------------------------------
# GET /mentor_dashboard_sales_progress/target
# ---------------------------------------------------------------------------

class RemoteTargetRecord(_Wire):
    kpi_id: Optional[int] = 0
    requirement_id: Optional[int] = 0
    target_count: int = 0

    def to_entry(self) -> TargetEntry:
        return TargetEntry(
            kpi_id=self.kpi_id or 0,
            requirement_id=self.requirement_id or 0,
            target_count=self.target_count,
        )
