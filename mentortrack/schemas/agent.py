from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Agent(BaseModel):
    """A sales agent assigned to the current mentor."""
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: Optional[int] = None
    full_name: str = ""
    profile_image: Optional[str] = None
    generation: Optional[int] = None
    current_rank: Optional[int] = None
    rank_name: Optional[str] = None
    probation_status: str = ""
    probation_extended: bool = False
    starting_date: Optional[date] = None
    property_type: Optional[str] = None


class Roster(BaseModel):
    """Result of a roster fetch: the mentor and their agents."""
    model_config = ConfigDict(frozen=True)

    mentor_id: Optional[int] = None
    agents: list[Agent] = Field(default_factory=list)
