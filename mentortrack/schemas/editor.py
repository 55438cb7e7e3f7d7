"""
Target editor schemas.

POST   /targets/editor         ← OpenEditorRequest   → TargetEditorResponse
PUT    /targets/editor/metric  ← SelectMetricRequest → TargetEditorResponse
PUT    /targets/editor/draft   ← DraftValueRequest   → TargetEditorResponse
POST   /targets/editor/save                          → SaveTargetResponse
"""
from typing import Optional, Union
from pydantic import BaseModel, Field

from mentortrack.schemas.catalog import MetricKind
from mentortrack.services.keyed_cache import MAX_WEEK, MIN_WEEK


class OpenEditorRequest(BaseModel):
    agent_id: int
    week: int = Field(ge=MIN_WEEK, le=MAX_WEEK)


class SelectMetricRequest(BaseModel):
    kind: MetricKind
    position: int = Field(ge=0, description="Zero-based catalog position.")


class DraftValueRequest(BaseModel):
    value: Union[int, str] = Field(
        description="New target. Text that is not a number counts as 0.",
        examples=[5],
    )


class TargetOptionOut(BaseModel):
    """A metric of the editor's current category with its current target."""
    kind: MetricKind
    position: int
    name: str
    metric_id: int
    current_target: int


class TargetDraftOut(BaseModel):
    kind: MetricKind
    position: int
    name: str
    metric_id: int
    current_target: int
    new_target: int


class TargetEditorResponse(BaseModel):
    agent_id: int
    week: int
    category: MetricKind
    options: list[TargetOptionOut]
    selected: Optional[TargetDraftOut] = None
    targets_loaded: bool
    saving: bool
    last_error: Optional[str] = None


class SaveTargetResponse(BaseModel):
    saved: bool
    editor: TargetEditorResponse
