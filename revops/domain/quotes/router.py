"""Quote router - Public quote capture and admin review"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AdminUser, require_admin
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from ...shared.schemas import success_response
from .schemas import QuoteCreate, QuoteUpdate
from .service import QuoteService, serialize_quote

router = APIRouter(prefix="/api/quotes", tags=["Quotes"])

quote_rate_limit = create_rate_limiter(limit=10, window_seconds=60, key_prefix="quotes")


def get_quote_service(db: Session = Depends(get_db)) -> QuoteService:
    """Dependency injection for QuoteService"""
    return QuoteService(db)


@router.post("", status_code=201, dependencies=[Depends(quote_rate_limit)])
async def create_quote(data: QuoteCreate, service: QuoteService = Depends(get_quote_service)):
    """Save a quote request (public)"""
    return success_response(service.create_quote(data), message="Quote created successfully")


@router.get("")
async def list_quotes(
    email: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    admin: AdminUser = Depends(require_admin),
    service: QuoteService = Depends(get_quote_service),
):
    """Quotes by email or status; the 50 most recent otherwise"""
    quotes = service.list_quotes(email, status)
    return success_response(quotes, meta={"count": len(quotes)})


@router.get("/{quote_id}")
async def get_quote(
    quote_id: str,
    admin: AdminUser = Depends(require_admin),
    service: QuoteService = Depends(get_quote_service),
):
    return success_response(serialize_quote(service.get_quote(quote_id)))


@router.patch("/{quote_id}")
async def update_quote(
    quote_id: str,
    data: QuoteUpdate,
    admin: AdminUser = Depends(require_admin),
    service: QuoteService = Depends(get_quote_service),
):
    return success_response(service.update_quote(quote_id, data), message="Quote updated")
