"""Conversation service - Contact relay to Slack, website chat and owner replies"""

import logging
from typing import Any, Optional

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...services.slack_service import (
    SlackService,
    build_chat_relay_text,
    build_contact_message,
)
from ...shared.validators import parse_iso_datetime
from .repository import ConversationRepository
from .schemas import ContactRequest, ConversationResponse, MessageResponse

logger = logging.getLogger(__name__)

RECENT_MESSAGE_COUNT = 3


def serialize_conversation(conversation) -> dict:
    return ConversationResponse.model_validate(conversation).model_dump(mode="json")


def serialize_message(message) -> dict:
    return MessageResponse.model_validate(message).model_dump(mode="json")


def parse_conversation_id(raw: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail="Invalid conversation ID") from e


class ConversationService:
    def __init__(self, db: Session, slack: Optional[SlackService] = None):
        self.db = db
        self.repo = ConversationRepository()
        self.slack = slack or SlackService()

    def _get_conversation(self, conversation_id: int):
        conversation = self.repo.get_conversation(self.db, conversation_id)
        if not conversation:
            raise HTTPException(status_code=404, detail="Conversation not found")
        return conversation

    async def submit_contact(self, data: ContactRequest) -> dict:
        """
        Relay a contact form to the owner's Slack DM and open a conversation.

        The Slack message ``ts`` becomes the conversation's thread id, so owner
        replies in that thread can be matched back by the events webhook.
        """
        if not self.slack.configured:
            logger.error("❌ Contact form received but Slack is not configured")
            raise HTTPException(status_code=500, detail="Slack integration not configured")

        if not all(v and v.strip() for v in (data.name, data.email, data.phone, data.message)):
            raise HTTPException(
                status_code=400, detail="Name, email, phone, and message are required"
            )

        email = data.email.strip().lower()
        fallback_text, blocks = build_contact_message(
            data.name, email, data.phone, data.message, company=data.company
        )

        try:
            slack_data = await self.slack.post_message(fallback_text, blocks=blocks)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Slack request failed for contact from {email}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send message") from e

        if not slack_data.get("ok"):
            raise HTTPException(
                status_code=500,
                detail={"error": "Failed to send message to Slack", "details": slack_data.get("error")},
            )

        closed = self.repo.close_active_conversations(self.db, email)
        if closed:
            logger.info(f"🔒 Closed {closed} active conversation(s) for {email}")

        conversation = self.repo.create_conversation(
            self.db,
            user_name=data.name.strip(),
            user_email=email,
            user_phone=data.phone.strip(),
            user_company=data.company,
            slack_thread_ts=slack_data.get("ts"),
        )
        self.repo.add_message(
            self.db,
            conversation_id=conversation.id,
            sender="user",
            message_text=data.message,
            slack_ts=slack_data.get("ts"),
        )
        logger.info(f"✅ Conversation {conversation.id} opened for {email}")

        return {
            "success": True,
            "message": "Your message has been sent successfully!",
            "conversation_id": conversation.id,
        }

    def get_messages(self, conversation_id: int, after: Optional[str] = None) -> dict:
        conversation = self._get_conversation(conversation_id)

        try:
            after_dt = parse_iso_datetime(after)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Invalid 'after' timestamp") from e

        messages = [serialize_message(m) for m in self.repo.get_messages(self.db, conversation.id, after_dt)]
        self.repo.mark_owner_messages_read(self.db, conversation.id)

        return {"conversation": serialize_conversation(conversation), "messages": messages}

    async def send_message(self, conversation_id: int, text: Any) -> dict:
        """Store a visitor's chat message and relay it to Slack"""
        conversation = self._get_conversation(conversation_id)

        if not isinstance(text, str) or not text.strip():
            raise HTTPException(status_code=400, detail="Message is required")

        message = self.repo.add_message(
            self.db, conversation_id=conversation.id, sender="user", message_text=text.strip()
        )
        self.repo.touch(self.db, conversation)

        if not self.slack.configured:
            logger.error(f"❌ Message {message.id} stored but Slack is not configured")
            raise HTTPException(status_code=500, detail="Slack integration not configured")

        relay_text = build_chat_relay_text(conversation.user_name, conversation.user_email, text.strip())
        try:
            await self.slack.post_message(relay_text)
        except (httpx.HTTPError, ValueError) as e:
            # Message is already saved
            logger.error(f"❌ Slack relay failed for conversation {conversation.id}: {e}")

        return {"success": True, "message": serialize_message(message)}

    def find_by_email(self, email: Any) -> dict:
        if not email or not isinstance(email, str):
            raise HTTPException(status_code=400, detail="Email is required")

        active = self.repo.get_active_by_email(self.db, email)
        if not active:
            return {"found": False, "conversation": None}

        latest = active[0]
        recent = self.repo.get_last_messages(self.db, latest.id, RECENT_MESSAGE_COUNT)
        return {
            "found": True,
            "conversation": {
                **serialize_conversation(latest),
                "recentMessages": [serialize_message(m) for m in recent],
            },
        }

    def handle_slack_event(self, payload: dict[str, Any]) -> dict:
        """Handle a Slack Events API callback; owner thread replies become messages"""
        if payload.get("type") == "url_verification":
            return {"challenge": payload.get("challenge")}

        if payload.get("type") != "event_callback":
            return {"ok": True}

        event = payload.get("event") or {}
        if event.get("type") != "message":
            return {"ok": True}

        # Edits, deletes and our own bot posts
        if event.get("subtype") or event.get("bot_id"):
            return {"ok": True}

        thread_ts = event.get("thread_ts")
        if not thread_ts:
            return {"ok": True}

        conversation = self.repo.get_by_thread_ts(self.db, thread_ts)
        if conversation and event.get("text"):
            self.repo.add_message(
                self.db,
                conversation_id=conversation.id,
                sender="owner",
                message_text=event["text"],
                slack_ts=event.get("ts"),
            )
            self.repo.touch(self.db, conversation)
            logger.info(f"✅ Stored owner reply for conversation {conversation.id}")

        return {"ok": True}
