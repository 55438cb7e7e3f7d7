from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from mentortrack import __version__
from mentortrack.core.config import Settings, settings
from mentortrack.core.dependencies import get_dashboard
from mentortrack.core.logging import configure_logging
from mentortrack.db.base import SessionLocal
from mentortrack.routers import comments as comments_router
from mentortrack.routers import dashboard as dashboard_router
from mentortrack.routers import targets as targets_router
from mentortrack.core.errors import (
    MentorTrackException,
    mentortrack_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)
from mentortrack.services.coordinator import DashboardTimings, MentorDashboard
from mentortrack.services.remote import DataSource, HttpDataSource
from mentortrack.services.sql_source import SqlDataSource

logger = logging.getLogger(__name__)


def build_data_source(s: Settings) -> DataSource:
    if s.DATA_SOURCE == "sql":
        return SqlDataSource(SessionLocal, mentor_id=s.MENTOR_ID)
    return HttpDataSource(
        s.REMOTE_BASE_URL,
        api_token=s.REMOTE_API_TOKEN,
        timeout=s.REQUEST_TIMEOUT_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    source = build_data_source(settings)
    dashboard = MentorDashboard(source, timings=DashboardTimings.from_settings(settings))
    app.state.dashboard = dashboard
    logger.info("Dashboard session started (source=%s, env=%s)", settings.DATA_SOURCE, settings.APP_ENV)
    if settings.WARM_ON_STARTUP:
        await dashboard.start()
    try:
        yield
    finally:
        await dashboard.close()
        close = getattr(source, "close", None)
        if close is not None:
            close()


app = FastAPI(
    title="mentortrack API",
    description=(
        "**Mentor dashboard performance tracking**\n\n"
        "Serves a mentor's sales agents with their weekly KPI, skillset and "
        "requirement progress against mentor-set targets, and lets the mentor "
        "edit those targets.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(MentorTrackException, mentortrack_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(dashboard_router.router)
app.include_router(targets_router.router)
app.include_router(comments_router.router)


@app.get("/health", tags=["health"], summary="Health check")
async def health(dashboard: MentorDashboard = Depends(get_dashboard)):
    """
    Liveness probe. Always 200 while the process serves requests; reports
    whether roster and catalog are loaded so a broken upstream is visible.
    """
    return {
        "status": "ok",
        "env": settings.APP_ENV,
        "source": settings.DATA_SOURCE,
        "roster_loaded": dashboard.roster.loaded,
        "catalog_loaded": dashboard.catalog.get() is not None,
    }
