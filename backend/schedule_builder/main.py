"""
Schedule builder - construction schedule engine with cascading date propagation.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from schedule_builder import __version__
from schedule_builder.config import get_settings
from schedule_builder.database import init_db
from schedule_builder.routes import schedules
from schedule_builder.exceptions import ErrorResponse, register_exception_handlers
from schedule_builder.logging_config import setup_logging, get_logger
from schedule_builder.services.autosave import AutoSaver
from schedule_builder.services.host import ScheduleHost
from schedule_builder.services.store import ScheduleStore

# Initialize logging
setup_logging()
logger = get_logger(__name__)


def build_host() -> ScheduleHost:
    """Create the schedule host with the configured auto-save backend."""
    settings = get_settings()
    saver_factory = AutoSaver
    if settings.autosave_backend == "arq":
        from schedule_builder.worker import ArqAutoSaver
        saver_factory = ArqAutoSaver
    logger.info(
        f"Auto-save backend: {settings.autosave_backend} "
        f"(quiet period {settings.autosave_quiet_seconds}s)"
    )
    return ScheduleHost(ScheduleStore(), settings, saver_factory=saver_factory)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Schedule Builder API...")
    await init_db()
    logger.info("Database initialized")
    app.state.host = build_host()
    yield
    logger.info("Shutting down Schedule Builder API...")
    await app.state.host.shutdown()


app = FastAPI(
    title="Schedule Builder",
    description="Construction schedule engine with cascading date propagation",
    version=__version__,
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(
    schedules.router,
    prefix="/projects/{project_id}/schedule",
    tags=["Schedules"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
