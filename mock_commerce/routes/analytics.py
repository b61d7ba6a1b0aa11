"""Analytics collector routes for the mock backend"""

from typing import Optional

from fastapi import APIRouter, Query

from ..database.events import event_log
from ..models.events import AnalyticsEvent

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.post("/events")
async def record_event(event: AnalyticsEvent):
    event_log.record(event)
    return {"ok": True}


@router.get("/events", response_model=list[AnalyticsEvent])
async def list_events(event: Optional[str] = Query(None, description="Filter by event name")):
    return event_log.list_events(event)
