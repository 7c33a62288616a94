import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import DEFAULT_TIMEZONE
from ..rate_limiter import create_rate_limiter
from ..services.calcom_service import CalcomAPIError, CalcomConfigError, CalcomService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calcom", tags=["calcom"])

booking_rate_limit = create_rate_limiter(limit=10, window_seconds=600, key_prefix="calcom_booking")


class BookingRequest(BaseModel):
    eventTypeId: Optional[Any] = None
    start: Optional[str] = None
    responses: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None
    timeZone: Optional[str] = None


def get_calcom_service() -> CalcomService:
    try:
        return CalcomService()
    except CalcomConfigError as e:
        logger.error("❌ CALCOM_API_KEY not configured")
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/availability")
async def get_calcom_availability(
    startTime: Optional[str] = Query(None),
    endTime: Optional[str] = Query(None),
    eventTypeId: Optional[str] = Query(None),
):
    """Proxy Cal.com available slots"""
    if not startTime or not endTime:
        raise HTTPException(
            status_code=400, detail="Missing required parameters: startTime and endTime"
        )

    calcom = get_calcom_service()
    try:
        return await calcom.get_available_slots(startTime, endTime, eventTypeId)
    except CalcomAPIError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": "Failed to fetch availability from Cal.com",
                "details": e.details,
                "status": e.status_code,
            },
        )
    except Exception as e:
        logger.error(f"❌ Cal.com availability request failed: {e}")
        raise HTTPException(
            status_code=500, detail={"error": "Internal server error", "details": str(e)}
        ) from e


@router.post("/booking", dependencies=[Depends(booking_rate_limit)])
async def create_calcom_booking(data: BookingRequest):
    """Create a Cal.com booking"""
    if not data.eventTypeId or not data.start or not data.responses:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: eventTypeId, start, and responses",
        )

    calcom = get_calcom_service()
    try:
        booking = await calcom.create_booking(
            event_type_id=data.eventTypeId,
            start=data.start,
            responses=data.responses,
            metadata=data.metadata,
            time_zone=data.timeZone or DEFAULT_TIMEZONE,
        )
    except CalcomAPIError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"error": "Failed to create booking with Cal.com", "details": e.details},
        )
    except Exception as e:
        logger.error(f"❌ Cal.com booking request failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e

    logger.info(f"✅ Cal.com booking created for event type {data.eventTypeId}")
    return booking


@router.get("/test")
async def test_calcom_connection(calcom: CalcomService = Depends(get_calcom_service)):
    """Check that the configured API key can reach Cal.com"""
    try:
        return await calcom.test_connection()
    except Exception as e:
        logger.error(f"❌ Cal.com connection test failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
