"""
Comments router. Comments are kept for the session only.

GET  /comments/{agent_id}/{week}
PUT  /comments/{agent_id}/{week}
POST /comments/{agent_id}/{week}/save
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from mentortrack.core.dependencies import get_dashboard
from mentortrack.schemas.common import ErrorResponse
from mentortrack.schemas.dashboard import CommentRequest, CommentResponse
from mentortrack.services.coordinator import MentorDashboard
from mentortrack.services.keyed_cache import MAX_WEEK, MIN_WEEK

router = APIRouter(prefix="/comments", tags=["comments"])

_ERRORS = {404: {"model": ErrorResponse, "description": "Agent is not in the roster."}}


def _response(dashboard: MentorDashboard, agent_id: int, week: int) -> CommentResponse:
    return CommentResponse(
        agent_id=agent_id,
        week=week,
        text=dashboard.comment(agent_id, week),
        saved=dashboard.comments.is_saved(agent_id, week),
    )


@router.get("/{agent_id}/{week}", response_model=CommentResponse, responses=_ERRORS)
async def get_comment(
    agent_id: int,
    week: int = Path(ge=MIN_WEEK, le=MAX_WEEK),
    dashboard: MentorDashboard = Depends(get_dashboard),
):
    dashboard.roster.find(agent_id)
    return _response(dashboard, agent_id, week)


@router.put("/{agent_id}/{week}", response_model=CommentResponse, responses=_ERRORS)
async def set_comment(
    payload: CommentRequest,
    agent_id: int,
    week: int = Path(ge=MIN_WEEK, le=MAX_WEEK),
    dashboard: MentorDashboard = Depends(get_dashboard),
):
    dashboard.set_comment(agent_id, week, payload.text)
    return _response(dashboard, agent_id, week)


@router.post("/{agent_id}/{week}/save", response_model=CommentResponse, responses=_ERRORS)
async def save_comment(
    agent_id: int,
    week: int = Path(ge=MIN_WEEK, le=MAX_WEEK),
    dashboard: MentorDashboard = Depends(get_dashboard),
):
    dashboard.save_comment(agent_id, week)
    return _response(dashboard, agent_id, week)
