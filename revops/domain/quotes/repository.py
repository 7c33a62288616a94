"""Quote repository - Database operations for quotes"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Quote


class QuoteRepository:
    """Repository for quote database operations"""

    @staticmethod
    def create_quote(db: Session, **quote_data) -> Quote:
        quote = Quote(**quote_data)
        db.add(quote)
        db.commit()
        db.refresh(quote)
        return quote

    @staticmethod
    def get_quote_by_id(db: Session, quote_id: str) -> Optional[Quote]:
        return db.query(Quote).filter(Quote.id == quote_id).first()

    @staticmethod
    def get_quotes(
        db: Session, email: Optional[str] = None, status: Optional[str] = None, limit: int = 50
    ) -> list[Quote]:
        """Newest first; unfiltered listings are capped at ``limit``"""
        query = db.query(Quote)
        if email:
            query = query.filter(Quote.user_email == email.strip().lower())
        if status:
            query = query.filter(Quote.status == status)

        query = query.order_by(Quote.created_at.desc())
        if not email and not status:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def update_quote(db: Session, quote: Quote, **updates) -> Quote:
        for key, value in updates.items():
            if hasattr(quote, key):
                setattr(quote, key, value)

        db.commit()
        db.refresh(quote)
        return quote
