"""Lazy scheduler bootstrap endpoint."""
from fastapi import APIRouter, Request
from app.schemas.system_event import CronInitResponse
from app.tasks.event_sweep import EventSweepScheduler

router = APIRouter()


@router.get("/init", response_model=CronInitResponse)
async def init_cron(request: Request):
    """Start the event sweep if it is not running yet."""
    scheduler: EventSweepScheduler = request.app.state.event_sweep
    started = scheduler.start()
    if started:
        message = "Cron jobs initialized"
    else:
        message = "Cron jobs already initialized"
    return CronInitResponse(message=message, already_initialized=not started)
