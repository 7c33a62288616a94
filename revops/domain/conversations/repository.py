"""Conversation repository - Database operations for chat threads and messages"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Conversation, Message, utcnow


class ConversationRepository:
    """Repository for conversation and message database operations"""

    @staticmethod
    def get_conversation(db: Session, conversation_id: int) -> Optional[Conversation]:
        return db.query(Conversation).filter(Conversation.id == conversation_id).first()

    @staticmethod
    def get_by_thread_ts(db: Session, thread_ts: str) -> Optional[Conversation]:
        return db.query(Conversation).filter(Conversation.slack_thread_ts == thread_ts).first()

    @staticmethod
    def get_active_by_email(db: Session, email: str) -> list[Conversation]:
        """Active conversations for an email, most recently updated first"""
        return (
            db.query(Conversation)
            .filter(Conversation.user_email == email.strip().lower(), Conversation.status == "active")
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
            .all()
        )

    @staticmethod
    def close_active_conversations(db: Session, email: str) -> int:
        """Close every active conversation for the email (one open thread per visitor)"""
        closed = (
            db.query(Conversation)
            .filter(Conversation.user_email == email.strip().lower(), Conversation.status == "active")
            .update({"status": "closed", "updated_at": utcnow()}, synchronize_session=False)
        )
        db.commit()
        return closed

    @staticmethod
    def create_conversation(db: Session, **conversation_data) -> Conversation:
        conversation = Conversation(**conversation_data)
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation

    @staticmethod
    def touch(db: Session, conversation: Conversation) -> None:
        conversation.updated_at = utcnow()
        db.commit()

    @staticmethod
    def add_message(db: Session, **message_data) -> Message:
        message = Message(**message_data)
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    @staticmethod
    def get_messages(
        db: Session, conversation_id: int, after: Optional[datetime] = None
    ) -> list[Message]:
        query = db.query(Message).filter(Message.conversation_id == conversation_id)
        if after:
            query = query.filter(Message.sent_at > after)
        return query.order_by(Message.sent_at, Message.id).all()

    @staticmethod
    def get_last_messages(db: Session, conversation_id: int, count: int) -> list[Message]:
        """Last ``count`` messages in chronological order"""
        latest = (
            db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.sent_at.desc(), Message.id.desc())
            .limit(count)
            .all()
        )
        return list(reversed(latest))

    @staticmethod
    def mark_owner_messages_read(db: Session, conversation_id: int) -> int:
        updated = (
            db.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.sender == "owner",
                Message.read_by_user.is_(False),
            )
            .update({"read_by_user": True}, synchronize_session=False)
        )
        db.commit()
        return updated
