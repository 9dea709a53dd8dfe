"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from app.config import settings
from app.core.exceptions import register_exception_handlers
from app.database import init_db, close_db, engine
from app.logging_config import setup_logging
from app.middleware.metrics import MetricsMiddleware, setup_metrics
from app.middleware.sweep_bootstrap import EventSweepBootstrapMiddleware
from app.services.event_service import event_recorder
from app.tasks.event_sweep import EventSweepScheduler
from app.api.v1 import (
    auth,
    projects,
    tasks,
    comments,
    notifications,
    history,
    system_events,
    cron,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    await init_db()
    # Started lazily by the first API request or GET /cron/init.
    app.state.event_sweep = EventSweepScheduler()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield
    # Shutdown
    await app.state.event_sweep.stop()
    await event_recorder.drain()
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(EventSweepBootstrapMiddleware)
app.add_middleware(MetricsMiddleware)

register_exception_handlers(app)
setup_metrics(app)

# Include routers
app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])
app.include_router(projects.router, prefix=f"{settings.API_V1_PREFIX}/projects", tags=["projects"])
app.include_router(tasks.router, prefix=f"{settings.API_V1_PREFIX}/tasks", tags=["tasks"])
app.include_router(comments.router, prefix=f"{settings.API_V1_PREFIX}/comments", tags=["comments"])
app.include_router(
    notifications.router, prefix=f"{settings.API_V1_PREFIX}/notifications", tags=["notifications"]
)
app.include_router(history.router, prefix=f"{settings.API_V1_PREFIX}/history", tags=["history"])
app.include_router(
    system_events.router,
    prefix=f"{settings.API_V1_PREFIX}/system-events",
    tags=["system-events"],
)
app.include_router(cron.router, prefix=f"{settings.API_V1_PREFIX}/cron", tags=["cron"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    health_status = {
        "status": "ok",
        "checks": {
            "database": "unknown",
            "event_sweep": "unknown",
        },
    }

    # Check database
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        health_status["checks"]["database"] = "ok"
    except Exception as e:
        health_status["checks"]["database"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    scheduler = getattr(app.state, "event_sweep", None)
    health_status["checks"]["event_sweep"] = "running" if scheduler and scheduler.started else "idle"

    return health_status
