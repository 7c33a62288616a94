"""Conversation router - Contact form, chat widget and Slack events webhook"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ...database import get_db
from ...rate_limiter import create_rate_limiter
from ...webhook_security import verify_slack_request
from .schemas import ContactRequest, FindByEmailRequest, SendMessageRequest
from .service import ConversationService, parse_conversation_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Conversations"])

contact_rate_limit = create_rate_limiter(limit=5, window_seconds=300, key_prefix="contact")
message_rate_limit = create_rate_limiter(limit=30, window_seconds=60, key_prefix="chat_message")


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    """Dependency injection for ConversationService"""
    return ConversationService(db)


@router.post("/contact", dependencies=[Depends(contact_rate_limit)])
async def submit_contact(
    data: ContactRequest, service: ConversationService = Depends(get_conversation_service)
):
    """Contact form submission relayed to Slack"""
    return await service.submit_contact(data)


@router.get("/conversations/{conversation_id}/messages")
async def get_conversation_messages(
    conversation_id: str,
    after: Optional[str] = Query(None),
    service: ConversationService = Depends(get_conversation_service),
):
    """Messages for the chat widget; polling clients pass ``after``"""
    return service.get_messages(parse_conversation_id(conversation_id), after)


@router.post("/conversations/{conversation_id}/messages", dependencies=[Depends(message_rate_limit)])
async def send_conversation_message(
    conversation_id: str,
    data: SendMessageRequest,
    service: ConversationService = Depends(get_conversation_service),
):
    return await service.send_message(parse_conversation_id(conversation_id), data.message)


@router.post("/conversations/find-by-email")
async def find_conversation_by_email(
    data: FindByEmailRequest, service: ConversationService = Depends(get_conversation_service)
):
    """Resume the visitor's active conversation, if any"""
    return service.find_by_email(data.email)


@router.post("/slack/events")
async def slack_events(
    request: Request, service: ConversationService = Depends(get_conversation_service)
):
    """Slack Events API webhook"""
    raw_body = await verify_slack_request(request)

    try:
        payload = json.loads(raw_body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid JSON payload") from e
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    try:
        return service.handle_slack_event(payload)
    except Exception as e:
        logger.error(f"❌ Slack events webhook error: {e}")
        raise HTTPException(status_code=500, detail="Webhook processing failed") from e
