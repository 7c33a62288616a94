"""Conversation schemas - Contact form, chat widget and Slack events"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

MESSAGE_SENDERS = ("user", "owner")


class ContactRequest(BaseModel):
    # Required fields are checked in the service so the error names all of them
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    company: Optional[str] = None


class SendMessageRequest(BaseModel):
    message: Optional[Any] = None


class FindByEmailRequest(BaseModel):
    email: Optional[Any] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    sender: str
    message_text: str
    sent_at: Optional[datetime] = None
    read_by_user: bool = False
    slack_ts: Optional[str] = None


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_name: str
    user_email: str
    user_phone: Optional[str] = None
    user_company: Optional[str] = None
    slack_thread_ts: Optional[str] = None
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
