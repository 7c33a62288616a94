import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request

from .config import ADMIN_EMAIL, get_admin_api_key
from .webhook_security import constant_time_compare

logger = logging.getLogger(__name__)


@dataclass
class AdminUser:
    """Authenticated admin plus request details recorded in the audit log"""

    name: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def require_admin(
    request: Request,
    x_admin_key: Optional[str] = Header(None),
    x_admin_user: Optional[str] = Header(None),
) -> AdminUser:
    """Verify the static admin API key sent in the X-Admin-Key header"""
    expected_key = get_admin_api_key()

    if not expected_key:
        logger.error("❌ ADMIN_API_KEY not configured - rejecting admin request")
        raise HTTPException(status_code=401, detail="Admin authentication not configured")

    if not x_admin_key:
        logger.warning(f"🚫 Missing admin key for {request.method} {request.url.path}")
        raise HTTPException(status_code=401, detail="Missing admin API key")

    if not constant_time_compare(x_admin_key, expected_key):
        logger.warning(
            f"🚫 Invalid admin key for {request.method} {request.url.path} from {get_client_ip(request)}"
        )
        raise HTTPException(status_code=401, detail="Invalid admin API key")

    return AdminUser(
        name=x_admin_user or "admin",
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


async def get_taskflow_user(x_user_email: Optional[str] = Header(None)) -> str:
    """
    Resolve the TaskFlow user id.

    Sessions are issued by the frontend; the API trusts the forwarded email and
    falls back to the site owner when none is sent.
    """
    if x_user_email and x_user_email.strip():
        return x_user_email.strip().lower()
    return ADMIN_EMAIL
