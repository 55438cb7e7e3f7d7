"""
Target editor router.

The editor is one per dashboard session: open it for an agent and week,
pick a metric, set the draft value, save. A failed save keeps the draft
so the mentor can retry.

POST   /targets/editor          open for (agent, week)
GET    /targets/editor          current editor state
PUT    /targets/editor/metric   select the metric to edit
PUT    /targets/editor/draft    set the new target value
POST   /targets/editor/save     write the draft
DELETE /targets/editor          close
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from mentortrack.core.dependencies import get_dashboard
from mentortrack.core.errors import TargetEditorClosedError
from mentortrack.schemas.common import ErrorResponse
from mentortrack.schemas.editor import (
    DraftValueRequest,
    OpenEditorRequest,
    SaveTargetResponse,
    SelectMetricRequest,
    TargetDraftOut,
    TargetEditorResponse,
    TargetOptionOut,
)
from mentortrack.services.coordinator import MentorDashboard, TargetEditor
from mentortrack.services.metric_ids import to_absolute_id

router = APIRouter(prefix="/targets", tags=["targets"])

_EDITOR_ERRORS = {
    409: {"model": ErrorResponse, "description": "Editor closed, no metric selected or catalog missing."},
    422: {"model": ErrorResponse, "description": "Unknown metric or invalid target value."},
}


def _editor_to_response(editor: TargetEditor, dashboard: MentorDashboard) -> TargetEditorResponse:
    catalog = dashboard.catalog.get()
    entries = catalog.entries(editor.category) if catalog else []
    options = [
        TargetOptionOut(
            kind=e.kind,
            position=e.position,
            name=e.name,
            metric_id=to_absolute_id(e.kind, e.position),
            current_target=dashboard.targets.lookup(e.kind, e.position, editor.agent_id, editor.week),
        )
        for e in entries
    ]
    selected = None
    if editor.selected is not None:
        d = editor.selected
        selected = TargetDraftOut(
            kind=d.kind,
            position=d.position,
            name=d.name,
            metric_id=to_absolute_id(d.kind, d.position),
            current_target=d.current_target,
            new_target=d.new_target,
        )
    return TargetEditorResponse(
        agent_id=editor.agent_id,
        week=editor.week,
        category=editor.category,
        options=options,
        selected=selected,
        targets_loaded=dashboard.targets.get(editor.agent_id, editor.week) is not None,
        saving=editor.saving,
        last_error=editor.last_error,
    )


def _current_editor(dashboard: MentorDashboard) -> TargetEditor:
    if dashboard.editor is None:
        raise TargetEditorClosedError()
    return dashboard.editor


@router.post(
    "/editor",
    response_model=TargetEditorResponse,
    summary="Open the target editor for an agent and week",
    responses={404: {"model": ErrorResponse, "description": "Agent is not in the roster."}},
)
async def open_editor(payload: OpenEditorRequest, dashboard: MentorDashboard = Depends(get_dashboard)):
    editor = await dashboard.open_target_editor(payload.agent_id, payload.week)
    return _editor_to_response(editor, dashboard)


@router.get("/editor", response_model=TargetEditorResponse, responses=_EDITOR_ERRORS)
async def get_editor(dashboard: MentorDashboard = Depends(get_dashboard)):
    return _editor_to_response(_current_editor(dashboard), dashboard)


@router.put(
    "/editor/metric",
    response_model=TargetEditorResponse,
    summary="Select the metric to edit",
    responses=_EDITOR_ERRORS,
)
async def select_metric(payload: SelectMetricRequest, dashboard: MentorDashboard = Depends(get_dashboard)):
    """The draft starts at the metric's current target (0 when unset)."""
    dashboard.select_target_metric(payload.kind, payload.position)
    return _editor_to_response(_current_editor(dashboard), dashboard)


@router.put(
    "/editor/draft",
    response_model=TargetEditorResponse,
    summary="Set the draft target value",
    responses=_EDITOR_ERRORS,
)
async def set_draft(payload: DraftValueRequest, dashboard: MentorDashboard = Depends(get_dashboard)):
    dashboard.set_target_draft_value(payload.value)
    return _editor_to_response(_current_editor(dashboard), dashboard)


@router.post(
    "/editor/save",
    response_model=SaveTargetResponse,
    summary="Write the draft target",
    responses=_EDITOR_ERRORS,
)
async def save(dashboard: MentorDashboard = Depends(get_dashboard)):
    """
    On success the selection clears and the agent's targets are re-read.
    On failure `saved` is false, the draft is kept and `last_error` says why.
    """
    saved = await dashboard.save_target()
    return SaveTargetResponse(saved=saved, editor=_editor_to_response(_current_editor(dashboard), dashboard))


@router.delete("/editor", status_code=204, summary="Close the target editor")
async def close_editor(dashboard: MentorDashboard = Depends(get_dashboard)):
    dashboard.close_target_editor()
