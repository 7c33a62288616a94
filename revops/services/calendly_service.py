import logging
from typing import Any, Optional

import httpx

from ..config import get_calendly_api_token

logger = logging.getLogger(__name__)


class CalendlyConfigError(Exception):
    """Raised when CALENDLY_API_TOKEN is not set"""


class CalendlyAPIError(Exception):
    """Non-2xx response from the Calendly API"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Calendly API error ({status_code}): {body}")


class CalendlyService:
    """Service for interacting with the Calendly API using a personal access token"""

    BASE_URL = "https://api.calendly.com"

    def __init__(self, token: Optional[str] = None):
        self.token = token or get_calendly_api_token()
        if not self.token:
            raise CalendlyConfigError("CALENDLY_API_TOKEN environment variable is not set")

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.request(
                method,
                f"{self.BASE_URL}{path}",
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json",
                },
                params=params,
                json=json,
            )

        if response.is_error:
            logger.error(f"❌ Calendly {method} {path} failed: {response.status_code}")
            raise CalendlyAPIError(response.status_code, response.text)

        return response.json()

    async def get_current_user(self) -> dict[str, Any]:
        """Get the user that owns the access token"""
        return await self._request("GET", "/users/me")

    async def list_event_types(self, user_uri: str) -> dict[str, Any]:
        """List the user's active event types"""
        return await self._request("GET", "/event_types", params={"user": user_uri, "active": "true"})

    async def get_event_type(self, uuid: str) -> dict[str, Any]:
        return await self._request("GET", f"/event_types/{uuid}")

    async def get_available_times(
        self, event_type_uri: str, start_time: str, end_time: str
    ) -> dict[str, Any]:
        """Available start times for an event type (Calendly caps the range at 7 days)"""
        return await self._request(
            "GET",
            "/event_type_available_times",
            params={"event_type": event_type_uri, "start_time": start_time, "end_time": end_time},
        )

    async def create_scheduling_link(
        self, owner: str, max_event_count: int = 1, owner_type: str = "EventType"
    ) -> dict[str, Any]:
        """Create a single-use scheduling link"""
        logger.info(f"🔗 Creating Calendly scheduling link for {owner}")
        return await self._request(
            "POST",
            "/scheduling_links",
            json={"max_event_count": max_event_count, "owner": owner, "owner_type": owner_type},
        )

    async def get_scheduled_events(
        self,
        user_uri: str,
        count: int = 20,
        invitee_email: Optional[str] = None,
        min_start_time: Optional[str] = None,
        max_start_time: Optional[str] = None,
        status: Optional[str] = None,
    ) -> dict[str, Any]:
        """Get scheduled events for a user"""
        params: dict[str, Any] = {"user": user_uri, "count": count}
        if invitee_email:
            params["invitee_email"] = invitee_email
        if min_start_time:
            params["min_start_time"] = min_start_time
        if max_start_time:
            params["max_start_time"] = max_start_time
        if status:
            params["status"] = status
        return await self._request("GET", "/scheduled_events", params=params)

    async def get_event_invitees(self, event_uuid: str) -> dict[str, Any]:
        """Get invitees for a scheduled event"""
        return await self._request("GET", f"/scheduled_events/{event_uuid}/invitees")
