"""
SqlDataSource: the DataSource contract served from a local database.

Same five calls as HttpDataSource, read from the SQLAlchemy models in
mentortrack/models. Each call opens its own session and runs in a worker
thread. Database errors surface as RemoteServiceError, and rows that do not fit
the domain types as MalformedResponseError, so the caches treat them
exactly like a failing remote service.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mentortrack.core.errors import MalformedResponseError, RemoteServiceError
from mentortrack.models.agent import SalesAgent
from mentortrack.models.metric_definition import MetricDefinition, MetricKindEnum
from mentortrack.models.progress import ActionProgressRow, RequirementProgressRow, SkillsetProgressRow
from mentortrack.models.target import SalesTarget
from mentortrack.schemas.agent import Agent, Roster
from mentortrack.schemas.catalog import Catalog
from mentortrack.schemas.progress import (
    ActionProgress,
    RequirementProgress,
    SkillsetProgress,
    Snapshot,
    round_half_up,
)
from mentortrack.schemas.target import TargetEntry, TargetSet, TargetUpdate

logger = logging.getLogger(__name__)


class SqlDataSource:
    def __init__(self, session_factory: Callable[[], Session], mentor_id: Optional[int]) -> None:
        self._session_factory = session_factory
        self._mentor_id = mentor_id

    async def fetch_roster(self) -> Roster:
        return await self._run("fetch_roster", self._roster)

    async def fetch_catalog(self) -> Catalog:
        return await self._run("fetch_catalog", self._catalog)

    async def fetch_snapshot(self, agent_id: int, week: int) -> Snapshot:
        return await self._run("fetch_snapshot", self._snapshot, agent_id, week)

    async def fetch_target_set(self, agent_id: int, week: int) -> TargetSet:
        return await self._run("fetch_target_set", self._target_set, agent_id, week)

    async def submit_target_update(self, update: TargetUpdate) -> None:
        await self._run("submit_target_update", self._upsert_target, update)

    async def _run(self, operation: str, func_, *args):
        return await asyncio.to_thread(self._in_session, operation, func_, *args)

    def _in_session(self, operation: str, func_, *args):
        db = self._session_factory()
        try:
            return func_(db, *args)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Database error during %s: %s", operation, exc)
            raise RemoteServiceError(f"Database error during {operation}", operation=operation) from exc
        except ValidationError as exc:
            logger.error("Unusable rows during %s: %s", operation, exc)
            raise MalformedResponseError(operation, f"{exc.error_count()} invalid field(s)") from exc
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _roster(self, db: Session) -> Roster:
        if self._mentor_id is None:
            raise RemoteServiceError("No mentor configured for the SQL data source", operation="fetch_roster")
        rows = (
            db.query(SalesAgent)
            .filter(SalesAgent.mentor_id == self._mentor_id)
            .order_by(SalesAgent.id)
            .all()
        )
        return Roster(
            mentor_id=self._mentor_id,
            agents=[
                Agent(
                    id=r.id,
                    user_id=r.user_id,
                    full_name=r.full_name,
                    profile_image=r.profile_image,
                    generation=r.generation,
                    current_rank=r.current_rank,
                    rank_name=r.rank_name,
                    probation_status=r.probation_status,
                    probation_extended=r.probation_extended,
                    starting_date=r.starting_date,
                    property_type=r.property_type,
                )
                for r in rows
            ],
        )

    def _catalog(self, db: Session) -> Catalog:
        rows = db.query(MetricDefinition).order_by(MetricDefinition.position).all()
        names: dict[MetricKindEnum, list[str]] = {kind: [] for kind in MetricKindEnum}
        for r in rows:
            names[r.kind].append(r.name)
        return Catalog.from_names(
            actions=names[MetricKindEnum.action],
            skillsets=names[MetricKindEnum.skillset],
            requirements=names[MetricKindEnum.requirement],
        )

    def _snapshot(self, db: Session, agent_id: int, week: int) -> Snapshot:
        actions = (
            db.query(ActionProgressRow.kpi_id, func.sum(ActionProgressRow.count))
            .filter(ActionProgressRow.agent_id == agent_id, ActionProgressRow.week_number == week)
            .group_by(ActionProgressRow.kpi_id)
            .order_by(ActionProgressRow.kpi_id)
            .all()
        )
        requirements = (
            db.query(RequirementProgressRow.requirement_id, func.sum(RequirementProgressRow.count))
            .filter(RequirementProgressRow.agent_id == agent_id, RequirementProgressRow.week_number == week)
            .group_by(RequirementProgressRow.requirement_id)
            .order_by(RequirementProgressRow.requirement_id)
            .all()
        )
        skill_rows = (
            db.query(SkillsetProgressRow)
            .filter(SkillsetProgressRow.agent_id == agent_id, SkillsetProgressRow.week_number == week)
            .order_by(SkillsetProgressRow.id)
            .all()
        )
        return Snapshot(
            agent_id=agent_id,
            week=week,
            actions=[ActionProgress(metric_id=k, count=int(c or 0)) for k, c in actions],
            skillsets=[s for s in (_skillset(r) for r in skill_rows) if s is not None],
            requirements=[RequirementProgress(metric_id=k, count=int(c or 0)) for k, c in requirements],
        )

    def _target_set(self, db: Session, agent_id: int, week: int) -> TargetSet:
        rows = (
            db.query(SalesTarget)
            .filter(SalesTarget.agent_id == agent_id, SalesTarget.week_number == week)
            .order_by(SalesTarget.id)
            .all()
        )
        return TargetSet(
            agent_id=agent_id,
            week=week,
            entries=[
                TargetEntry(kpi_id=r.kpi_id, requirement_id=r.requirement_id, target_count=r.target_count)
                for r in rows
            ],
        )

    def _upsert_target(self, db: Session, update: TargetUpdate) -> None:
        entry = update.to_entry()
        existing = (
            db.query(SalesTarget)
            .filter(
                SalesTarget.agent_id == update.agent_id,
                SalesTarget.week_number == update.week,
                SalesTarget.kpi_id == entry.kpi_id,
                SalesTarget.requirement_id == entry.requirement_id,
            )
            .first()
        )
        if existing is not None:
            existing.target_count = entry.target_count
            existing.mentor_id = update.mentor_id
        else:
            db.add(SalesTarget(
                mentor_id=update.mentor_id,
                agent_id=update.agent_id,
                week_number=update.week,
                kpi_id=entry.kpi_id,
                requirement_id=entry.requirement_id,
                target_count=entry.target_count,
            ))
        db.commit()


def _skillset(row: SkillsetProgressRow) -> Optional[SkillsetProgress]:
    """Row to SkillsetProgress; rows without any score are skipped."""
    if row.total_score is not None:
        return SkillsetProgress(metric_id=row.kpi_id, total_score=round_half_up(row.total_score))
    subs = (row.wording_score, row.tonality_score, row.rapport_score)
    if any(s is None for s in subs):
        return None
    return SkillsetProgress(
        metric_id=row.kpi_id,
        wording=float(row.wording_score),
        tonality=float(row.tonality_score),
        rapport=float(row.rapport_score),
    )
