"""
Dashboard router.

GET  /dashboard/agents                          roster with selected weeks
GET  /dashboard/catalog                         metric catalog
GET  /dashboard/notices                         drain queued notices
POST /dashboard/refresh                         force-reload everything
PUT  /dashboard/agents/{agent_id}/week          select a row's week
POST /dashboard/agents/{agent_id}/expand        expand a row
POST /dashboard/collapse                        collapse the expanded row
GET  /dashboard/agents/{agent_id}/weeks/{week}  cached week view (no I/O)
POST /dashboard/agents/{agent_id}/weeks/{week}/load
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from mentortrack.core.dependencies import get_dashboard
from mentortrack.schemas.agent import Agent
from mentortrack.schemas.catalog import MetricCatalogEntry, MetricKind
from mentortrack.schemas.common import ErrorResponse, NoticeOut
from mentortrack.schemas.dashboard import (
    AgentListResponse,
    AgentOut,
    CatalogEntryOut,
    CatalogResponse,
    CategoryProgressOut,
    MetricRowOut,
    SelectWeekRequest,
    WeekViewResponse,
)
from mentortrack.services.coordinator import MentorDashboard, WeekView
from mentortrack.services.display import format_starting_date, initials, probation_tone
from mentortrack.services.keyed_cache import MAX_WEEK, MIN_WEEK
from mentortrack.services.metric_ids import to_absolute_id
from mentortrack.services.progress import CategoryProgress, MetricProgress, format_skill_percentage

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _agent_to_response(a: Agent, dashboard: MentorDashboard) -> AgentOut:
    return AgentOut(
        id=a.id,
        user_id=a.user_id,
        full_name=a.full_name,
        initials=initials(a.full_name),
        profile_image=a.profile_image,
        generation=a.generation,
        current_rank=a.current_rank,
        rank_name=a.rank_name,
        probation_status=a.probation_status,
        probation_tone=probation_tone(a.probation_status),
        probation_extended=a.probation_extended,
        starting_date=str(a.starting_date) if a.starting_date else None,
        starting_date_display=format_starting_date(a.starting_date),
        property_type=a.property_type,
        selected_week=dashboard.roster.selected_week(a.id),
        expanded=dashboard.expanded_agent_id == a.id,
    )


def _roster_to_response(dashboard: MentorDashboard) -> AgentListResponse:
    return AgentListResponse(
        mentor_id=dashboard.roster.mentor_id,
        loading=dashboard.roster.is_loading,
        error=dashboard.roster.error,
        agents=[_agent_to_response(a, dashboard) for a in dashboard.agents],
    )


def _entry_to_response(e: MetricCatalogEntry) -> CatalogEntryOut:
    return CatalogEntryOut(
        kind=e.kind,
        name=e.name,
        position=e.position,
        metric_id=to_absolute_id(e.kind, e.position),
    )


def _row_to_response(r: MetricProgress) -> MetricRowOut:
    if r.kind == MetricKind.skillset:
        display = format_skill_percentage(r.observed)
    elif r.target > 0:
        display = f"{r.observed} / {r.target}"
    else:
        display = str(r.observed)
    return MetricRowOut(
        name=r.name,
        position=r.position,
        metric_id=r.metric_id,
        observed=r.observed,
        target=r.target,
        is_complete=r.is_complete,
        display=display,
    )


def _category_to_response(c: CategoryProgress) -> CategoryProgressOut:
    return CategoryProgressOut(completed=c.completed, total=c.total, ratio=c.ratio)


def week_view_to_response(v: WeekView) -> WeekViewResponse:
    return WeekViewResponse(
        agent_id=v.agent_id,
        week=v.week,
        percentage=v.progress.percentage,
        actions=_category_to_response(v.progress.actions),
        skillsets=_category_to_response(v.progress.skillsets),
        requirements=_category_to_response(v.progress.requirements),
        action_rows=[_row_to_response(r) for r in v.rows[MetricKind.action]],
        skillset_rows=[_row_to_response(r) for r in v.rows[MetricKind.skillset]],
        requirement_rows=[_row_to_response(r) for r in v.rows[MetricKind.requirement]],
        snapshot_loaded=v.snapshot is not None,
        targets_loaded=v.targets is not None,
        snapshot_loading=v.snapshot_loading,
        targets_loading=v.targets_loading,
        snapshot_error=v.snapshot_error,
        targets_error=v.targets_error,
        comment=v.comment,
    )


# ---------------------------------------------------------------------------
# Roster / catalog / notices
# ---------------------------------------------------------------------------

@router.get("/agents", response_model=AgentListResponse, summary="Agents of the current mentor")
async def list_agents(dashboard: MentorDashboard = Depends(get_dashboard)):
    return _roster_to_response(dashboard)


@router.get("/catalog", response_model=CatalogResponse, summary="Metric catalog")
async def get_catalog(dashboard: MentorDashboard = Depends(get_dashboard)):
    catalog = dashboard.catalog.get()
    if catalog is None:
        return CatalogResponse(
            loaded=False, loading=dashboard.catalog.is_loading, error=dashboard.catalog.error,
        )
    return CatalogResponse(
        loaded=True,
        loading=dashboard.catalog.is_loading,
        error=dashboard.catalog.error,
        actions=[_entry_to_response(e) for e in catalog.actions],
        skillsets=[_entry_to_response(e) for e in catalog.skillsets],
        requirements=[_entry_to_response(e) for e in catalog.requirements],
    )


@router.get(
    "/notices",
    response_model=list[NoticeOut],
    summary="Drain queued notices",
)
async def drain_notices(dashboard: MentorDashboard = Depends(get_dashboard)):
    """Returns every queued notice, oldest first, and empties the queue."""
    return [NoticeOut(level=n.level, message=n.message, created_at=n.created_at)
            for n in dashboard.drain_notices()]


@router.post("/refresh", response_model=AgentListResponse, summary="Reload all dashboard data")
async def refresh(dashboard: MentorDashboard = Depends(get_dashboard)):
    """
    Drops pending timers and in-flight results, reloads roster and catalog,
    then re-warms every agent's selected week in the background.
    """
    await dashboard.refresh_all()
    return _roster_to_response(dashboard)


# ---------------------------------------------------------------------------
# Row navigation
# ---------------------------------------------------------------------------

_NAV_ERRORS = {
    404: {"model": ErrorResponse, "description": "Agent is not in the roster."},
}


@router.put(
    "/agents/{agent_id}/week",
    response_model=AgentOut,
    summary="Select the week shown in an agent's row",
    responses=_NAV_ERRORS,
)
async def select_week(
    agent_id: int,
    payload: SelectWeekRequest,
    dashboard: MentorDashboard = Depends(get_dashboard),
):
    """The week's data loads after a short delay; rapid changes coalesce."""
    dashboard.select_week(agent_id, payload.week)
    return _agent_to_response(dashboard.roster.find(agent_id), dashboard)


@router.post(
    "/agents/{agent_id}/expand",
    response_model=AgentOut,
    summary="Expand an agent's row",
    responses=_NAV_ERRORS,
)
async def expand_agent(agent_id: int, dashboard: MentorDashboard = Depends(get_dashboard)):
    dashboard.expand_agent(agent_id)
    return _agent_to_response(dashboard.roster.find(agent_id), dashboard)


@router.post("/collapse", status_code=204, summary="Collapse the expanded row")
async def collapse_agent(dashboard: MentorDashboard = Depends(get_dashboard)):
    dashboard.collapse_agent()


# ---------------------------------------------------------------------------
# Week views
# ---------------------------------------------------------------------------

@router.get(
    "/agents/{agent_id}/weeks/{week}",
    response_model=WeekViewResponse,
    summary="Cached progress for one agent and week",
    responses=_NAV_ERRORS,
)
async def get_week(
    agent_id: int,
    week: int = Path(ge=MIN_WEEK, le=MAX_WEEK, description="Week number, 1-12."),
    dashboard: MentorDashboard = Depends(get_dashboard),
):
    """Never triggers a fetch; missing data shows as zero progress."""
    dashboard.roster.find(agent_id)
    return week_view_to_response(dashboard.week_view(agent_id, week))


@router.post(
    "/agents/{agent_id}/weeks/{week}/load",
    response_model=WeekViewResponse,
    summary="Fetch (when missing) and return one agent's week",
    responses=_NAV_ERRORS,
)
async def load_week(
    agent_id: int,
    week: int = Path(ge=MIN_WEEK, le=MAX_WEEK, description="Week number, 1-12."),
    dashboard: MentorDashboard = Depends(get_dashboard),
):
    return week_view_to_response(await dashboard.load_week(agent_id, week))
