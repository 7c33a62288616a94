import logging
from typing import Any, Optional

import httpx

from ..config import get_calcom_api_key

logger = logging.getLogger(__name__)


class CalcomConfigError(Exception):
    """Raised when CALCOM_API_KEY is not set"""


class CalcomAPIError(Exception):
    """Non-2xx response from Cal.com; the body is passed through to the caller"""

    def __init__(self, status_code: int, details: str):
        self.status_code = status_code
        self.details = details
        super().__init__(f"Cal.com API error ({status_code})")


class CalcomService:
    """Service for the Cal.com v1 REST API"""

    BASE_URL = "https://api.cal.com/v1"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or get_calcom_api_key()
        if not self.api_key:
            raise CalcomConfigError("Cal.com API key not configured")

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=15.0) as client:
            return await client.request(
                method,
                f"{self.BASE_URL}{path}",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                params=params,
                json=json,
            )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._send(method, path, **kwargs)
        if response.is_error:
            logger.error(f"❌ Cal.com {method} {path} failed: {response.status_code}")
            raise CalcomAPIError(response.status_code, response.text)
        return response.json()

    async def get_available_slots(
        self, start_time: str, end_time: str, event_type_id: Optional[str] = None
    ) -> dict[str, Any]:
        """Available slots between ``start_time`` and ``end_time``"""
        params = {"startTime": start_time, "endTime": end_time}
        if event_type_id:
            params["eventTypeId"] = event_type_id
        return await self._request("GET", "/slots/available", params=params)

    async def create_booking(
        self,
        event_type_id: Any,
        start: str,
        responses: dict[str, Any],
        time_zone: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Create a booking for an event type"""
        logger.info(f"📅 Creating Cal.com booking for event type {event_type_id} at {start}")
        return await self._request(
            "POST",
            "/bookings",
            json={
                "eventTypeId": event_type_id,
                "start": start,
                "responses": responses,
                "metadata": metadata or {},
                "timeZone": time_zone,
            },
        )

    async def test_connection(self) -> dict[str, Any]:
        """Call ``/event-types`` and report the raw outcome"""
        response = await self._send("GET", "/event-types")
        try:
            data = response.json()
        except ValueError:
            data = response.text

        return {
            "status": response.status_code,
            "ok": response.is_success,
            "data": data,
            "message": "Cal.com API connection successful"
            if response.is_success
            else "Cal.com API connection failed",
        }
