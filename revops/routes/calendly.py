import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..services.calendly_service import CalendlyConfigError, CalendlyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendly", tags=["calendly"])


class SchedulingLinkRequest(BaseModel):
    event_type_uri: Optional[str] = None


def get_calendly_service() -> CalendlyService:
    try:
        return CalendlyService()
    except CalendlyConfigError as e:
        logger.error(f"❌ {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/user")
async def get_calendly_user(calendly: CalendlyService = Depends(get_calendly_service)):
    """Current Calendly user (owner of the API token)"""
    try:
        return await calendly.get_current_user()
    except Exception as e:
        logger.error(f"❌ Failed to fetch Calendly user: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch user") from e


@router.get("/event-types")
async def get_calendly_event_types(calendly: CalendlyService = Depends(get_calendly_service)):
    """Active event types for the token's user"""
    try:
        user = await calendly.get_current_user()
        return await calendly.list_event_types(user["resource"]["uri"])
    except Exception as e:
        logger.error(f"❌ Failed to fetch Calendly event types: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch event types") from e


@router.get("/availability")
async def get_calendly_availability(
    event_type_uri: Optional[str] = Query(None),
    start_time: Optional[str] = Query(None),
    end_time: Optional[str] = Query(None),
    calendly: CalendlyService = Depends(get_calendly_service),
):
    """Available time slots for an event type"""
    if not event_type_uri or not start_time or not end_time:
        raise HTTPException(
            status_code=400,
            detail="Missing required parameters: event_type_uri, start_time, end_time",
        )

    try:
        return await calendly.get_available_times(event_type_uri, start_time, end_time)
    except Exception as e:
        logger.error(f"❌ Failed to fetch Calendly availability: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to fetch availability") from e


@router.post("/scheduling-link")
async def create_calendly_scheduling_link(
    data: SchedulingLinkRequest, calendly: CalendlyService = Depends(get_calendly_service)
):
    """Single-use scheduling link for an event type"""
    if not data.event_type_uri:
        raise HTTPException(status_code=400, detail="event_type_uri is required")

    try:
        return await calendly.create_scheduling_link(owner=data.event_type_uri)
    except Exception as e:
        logger.error(f"❌ Failed to create Calendly scheduling link: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to create scheduling link") from e
