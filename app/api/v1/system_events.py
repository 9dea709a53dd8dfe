"""Admin endpoints for the system event log."""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import require_admin
from app.models.system_event import SystemEventType
from app.models.user import User
from app.crud.system_event import system_event as system_event_crud
from app.schemas.system_event import SystemEventResponse, SweepResultResponse
from app.services.event_processor import event_processor

router = APIRouter()


@router.get("/", response_model=List[SystemEventResponse])
async def list_system_events(
    processed: Optional[bool] = None,
    type: Optional[SystemEventType] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Newest system events first."""
    return await system_event_crud.get_multi_filtered(
        db, processed=processed, event_type=type, skip=skip, limit=limit
    )


@router.post("/process", response_model=SweepResultResponse)
async def process_now(
    current_user: User = Depends(require_admin),
):
    """Run one sweep pass immediately."""
    result = await event_processor.process_system_events()
    return SweepResultResponse(**result.to_dict())
