"""
Shared pytest fixtures.

The HTTP tests run the real app wired to the SQL data source on a SQLite
file database seeded here, so no remote service is required. Engine tests
use the in-memory FakeDataSource from fakes.py instead.
"""
import os
from datetime import date
from decimal import Decimal

# Must be set before mentortrack.core.config is imported.
os.environ["DATA_SOURCE"] = "sql"
os.environ["DATABASE_URL"] = "sqlite:///./test_mentortrack.db"
os.environ["MENTOR_ID"] = "77"
os.environ["WARM_ON_STARTUP"] = "true"
os.environ["SNAPSHOT_STAGGER_MS"] = "10"
os.environ["EXPAND_DEBOUNCE_MS"] = "10"
os.environ["WEEK_CHANGE_DELAY_MS"] = "10"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from mentortrack.db.base import Base, SessionLocal, engine
from mentortrack.main import app
from mentortrack.models import (
    ActionProgressRow,
    MetricDefinition,
    RequirementProgressRow,
    SalesAgent,
    SkillsetProgressRow,
    SalesTarget,
)
from mentortrack.models.metric_definition import MetricKindEnum

MENTOR_ID = 77

_AGENTS = [
    # id, mentor, name, probation, start
    (101, MENTOR_ID, "Alice Tan", "Ongoing", date(2024, 1, 5)),
    (102, MENTOR_ID, "Bob Lee", "Passed", date(2023, 11, 20)),
    (103, MENTOR_ID, "Chen Wei", "Failed", None),
    (201, 88, "Other Mentor's Agent", "Ongoing", None),
]

_CATALOG = [
    (MetricKindEnum.action, ["Calls", "Meetings", "Closings"]),
    (MetricKindEnum.skillset, ["Opening", "Objection handling"]),
    (MetricKindEnum.requirement, ["Weekly report", "Training"]),
]


def _seed(db) -> None:
    for agent_id, mentor_id, name, probation, start in _AGENTS:
        db.add(SalesAgent(
            id=agent_id,
            mentor_id=mentor_id,
            user_id=agent_id + 1000,
            full_name=name,
            probation_status=probation,
            probation_extended=False,
            starting_date=start,
            current_rank=1,
            rank_name="Junior",
        ))
    for kind, names in _CATALOG:
        for position, name in enumerate(names):
            db.add(MetricDefinition(kind=kind, name=name, position=position))

    # Alice, week 3: Calls 3 + 2 = 5, Meetings 1; Opening 70; Objection handling
    # from sub-scores (60 + 70 + 80.5) / 3 = 70.17 -> 70; Weekly report 1.
    db.add_all([
        ActionProgressRow(agent_id=101, week_number=3, kpi_id=1, count=3),
        ActionProgressRow(agent_id=101, week_number=3, kpi_id=1, count=2),
        ActionProgressRow(agent_id=101, week_number=3, kpi_id=2, count=1),
        SkillsetProgressRow(agent_id=101, week_number=3, kpi_id=8, total_score=Decimal("70")),
        SkillsetProgressRow(
            agent_id=101, week_number=3, kpi_id=9,
            wording_score=Decimal("60"), tonality_score=Decimal("70"), rapport_score=Decimal("80.5"),
        ),
        RequirementProgressRow(agent_id=101, week_number=3, requirement_id=1, count=1),
    ])
    # Targets: Calls 5 (met), Opening 75 (missed), Weekly report 1 (met).
    db.add_all([
        SalesTarget(mentor_id=MENTOR_ID, agent_id=101, week_number=3, kpi_id=1, requirement_id=0, target_count=5),
        SalesTarget(mentor_id=MENTOR_ID, agent_id=101, week_number=3, kpi_id=8, requirement_id=0, target_count=75),
        SalesTarget(mentor_id=MENTOR_ID, agent_id=101, week_number=3, kpi_id=0, requirement_id=1, target_count=1),
    ])
    db.commit()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        _seed(db)
    finally:
        db.close()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
