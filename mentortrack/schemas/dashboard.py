"""
Dashboard API schemas.

GET  /dashboard/agents                       → AgentListResponse
GET  /dashboard/catalog                      → CatalogResponse
PUT  /dashboard/agents/{agent_id}/week       ← SelectWeekRequest
GET  /dashboard/agents/{agent_id}/weeks/{w}  → WeekViewResponse
GET|PUT /comments/{agent_id}/{week}          → CommentResponse
"""
from typing import Optional
from pydantic import BaseModel, Field

from mentortrack.schemas.catalog import MetricKind
from mentortrack.services.keyed_cache import MAX_WEEK, MIN_WEEK
from mentortrack.services.comments import MAX_COMMENT_LENGTH


class AgentOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    full_name: str
    initials: str = Field(description="Avatar fallback, e.g. 'JD'.")
    profile_image: Optional[str] = None
    generation: Optional[int] = None
    current_rank: Optional[int] = None
    rank_name: Optional[str] = None
    probation_status: str
    probation_tone: str = Field(description="Badge tone: warning, success, danger or info.")
    probation_extended: bool
    starting_date: Optional[str] = Field(default=None, description="ISO date.")
    starting_date_display: str = Field(examples=["Jan 5, 2024"])
    property_type: Optional[str] = None
    selected_week: int = Field(ge=MIN_WEEK, le=MAX_WEEK)
    expanded: bool


class AgentListResponse(BaseModel):
    mentor_id: Optional[int] = None
    loading: bool
    error: Optional[str] = None
    agents: list[AgentOut]


class CatalogEntryOut(BaseModel):
    kind: MetricKind
    name: str
    position: int
    metric_id: int = Field(description="Remote id: position + kind offset.")


class CatalogResponse(BaseModel):
    loaded: bool
    loading: bool
    error: Optional[str] = None
    actions: list[CatalogEntryOut] = Field(default_factory=list)
    skillsets: list[CatalogEntryOut] = Field(default_factory=list)
    requirements: list[CatalogEntryOut] = Field(default_factory=list)


class SelectWeekRequest(BaseModel):
    week: int = Field(ge=MIN_WEEK, le=MAX_WEEK, examples=[3])


class MetricRowOut(BaseModel):
    name: str
    position: int
    metric_id: int
    observed: int = Field(description="Count, or 0-100 score for skillsets.")
    target: int = Field(description="0 when no target is set.")
    is_complete: bool
    display: str = Field(examples=["3 / 5", "70%"])


class CategoryProgressOut(BaseModel):
    completed: int
    total: int
    ratio: float = Field(ge=0.0, le=1.0)


class WeekViewResponse(BaseModel):
    """Everything one expanded row shows for a week. Built from cache only."""
    agent_id: int
    week: int
    percentage: int = Field(ge=0, le=100, description="Weekly progress, rounded half-up.")
    actions: CategoryProgressOut
    skillsets: CategoryProgressOut
    requirements: CategoryProgressOut
    action_rows: list[MetricRowOut]
    skillset_rows: list[MetricRowOut]
    requirement_rows: list[MetricRowOut]
    snapshot_loaded: bool
    targets_loaded: bool
    snapshot_loading: bool
    targets_loading: bool
    snapshot_error: Optional[str] = None
    targets_error: Optional[str] = None
    comment: str = ""


class CommentRequest(BaseModel):
    text: str = Field(description=f"Truncated to {MAX_COMMENT_LENGTH} characters.")


class CommentResponse(BaseModel):
    agent_id: int
    week: int
    text: str
    saved: bool
