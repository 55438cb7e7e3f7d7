from datetime import datetime
from sqlalchemy import Integer, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mentortrack.db.base import Base


class SalesTarget(Base):
    __tablename__ = "sales_targets"
    __table_args__ = (
        UniqueConstraint(
            "agent_id", "week_number", "kpi_id", "requirement_id",
            name="uq_sales_target_agent_week_metric",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    mentor_id: Mapped[int] = mapped_column(Integer, nullable=False)
    agent_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    kpi_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    requirement_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
