"""
Observed weekly progress, one table per metric kind.

kpi_id / requirement_id hold remote ids (position + kind offset), the same
ids the hosted service reports. Several rows may exist for one id and week;
readers sum counts and keep the best skillset score.
"""
from sqlalchemy import Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from decimal import Decimal

from mentortrack.db.base import Base


class ActionProgressRow(Base):
    __tablename__ = "kpi_action_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    agent_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    kpi_id: Mapped[int] = mapped_column(Integer, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class SkillsetProgressRow(Base):
    __tablename__ = "kpi_skillset_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    agent_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    kpi_id: Mapped[int] = mapped_column(Integer, nullable=False)
    wording_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    tonality_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    rapport_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    total_score: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)


class RequirementProgressRow(Base):
    __tablename__ = "requirement_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    agent_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    requirement_id: Mapped[int] = mapped_column(Integer, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
