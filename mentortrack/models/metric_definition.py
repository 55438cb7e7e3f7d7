"""
MetricDefinition: one catalog entry.

`position` is the zero-based index within its kind's list; the remote id
of a row is derived from it (see services/metric_ids.py), never stored.
"""
import enum
from sqlalchemy import Integer, String, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mentortrack.db.base import Base


class MetricKindEnum(str, enum.Enum):
    action = "action"
    skillset = "skillset"
    requirement = "requirement"


class MetricDefinition(Base):
    __tablename__ = "metric_definitions"
    __table_args__ = (UniqueConstraint("kind", "position", name="uq_metric_kind_position"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    kind: Mapped[MetricKindEnum] = mapped_column(
        Enum(MetricKindEnum, name="metric_kind_enum"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
