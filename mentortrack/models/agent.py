from datetime import date
from sqlalchemy import Integer, String, Boolean, Date
from sqlalchemy.orm import Mapped, mapped_column

from mentortrack.db.base import Base


class SalesAgent(Base):
    __tablename__ = "sales_agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    mentor_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    full_name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    profile_image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    generation: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rank_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    probation_status: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    probation_extended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    starting_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    property_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
