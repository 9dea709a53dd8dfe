"""Starts the event sweep on the first API request."""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings


class EventSweepBootstrapMiddleware(BaseHTTPMiddleware):
    """Lazily start ``app.state.event_sweep`` once traffic arrives."""

    async def dispatch(self, request: Request, call_next):
        scheduler = getattr(request.app.state, "event_sweep", None)
        if (
            settings.EVENT_SWEEP_AUTOSTART
            and scheduler is not None
            and not scheduler.started
            and request.url.path.startswith("/api")
        ):
            scheduler.start()
        return await call_next(request)
