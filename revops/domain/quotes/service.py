"""Quote service - Quote capture and admin review"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Quote
from ...shared.schemas import to_column_values, to_update_values
from .repository import QuoteRepository
from .schemas import QUOTE_STATUSES, QuoteCreate, QuoteResponse, QuoteUpdate

logger = logging.getLogger(__name__)


def serialize_quote(quote: Quote) -> dict:
    return QuoteResponse.model_validate(quote).to_api()


class QuoteService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = QuoteRepository()

    def create_quote(self, data: QuoteCreate) -> dict:
        if not data.userEmail and not data.companyName:
            raise HTTPException(status_code=400, detail="Either userEmail or companyName is required")

        try:
            quote = self.repo.create_quote(self.db, **to_column_values(data))
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create quote: {e}")
            raise HTTPException(status_code=500, detail="Failed to create quote") from e

        logger.info(f"✅ Quote created: {quote.id} ({quote.user_email or quote.company_name})")
        return serialize_quote(quote)

    def list_quotes(self, email: Optional[str], status: Optional[str]) -> list[dict]:
        if status and status not in QUOTE_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Must be one of: {', '.join(QUOTE_STATUSES)}",
            )
        return [serialize_quote(q) for q in self.repo.get_quotes(self.db, email, status)]

    def get_quote(self, quote_id: str) -> Quote:
        quote = self.repo.get_quote_by_id(self.db, quote_id)
        if not quote:
            raise HTTPException(status_code=404, detail="Quote not found")
        return quote

    def update_quote(self, quote_id: str, data: QuoteUpdate) -> dict:
        quote = self.get_quote(quote_id)
        quote = self.repo.update_quote(self.db, quote, **to_update_values(data, Quote))
        logger.info(f"✅ Quote updated: {quote.id} (status={quote.status})")
        return serialize_quote(quote)
