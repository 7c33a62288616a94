import logging
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

import httpx

from ..config import CONTACT_TIMEZONE, get_slack_bot_token, get_slack_user_id
from ..utils.sanitization import escape_slack_text, truncate

logger = logging.getLogger(__name__)


class SlackNotConfiguredError(Exception):
    """Raised when SLACK_BOT_TOKEN or SLACK_USER_ID is missing"""


class SlackService:
    """Posts direct messages to the site owner through the Slack Web API"""

    BASE_URL = "https://slack.com/api"

    def __init__(self, token: Optional[str] = None, channel: Optional[str] = None):
        self.token = token or get_slack_bot_token()
        self.channel = channel or get_slack_user_id()

    @property
    def configured(self) -> bool:
        return bool(self.token and self.channel)

    async def post_message(self, text: str, blocks: Optional[list[dict]] = None) -> dict[str, Any]:
        """
        Send ``chat.postMessage`` to the owner's DM channel.

        Slack answers HTTP 200 with ``ok: false`` for API-level failures, so the
        parsed body is returned for the caller to inspect.
        """
        if not self.configured:
            raise SlackNotConfiguredError("Slack integration not configured")

        payload: dict[str, Any] = {
            "channel": self.channel,
            "text": text,
            "unfurl_links": False,
            "unfurl_media": False,
        }
        if blocks:
            payload["blocks"] = blocks

        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(
                f"{self.BASE_URL}/chat.postMessage",
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        if data.get("ok"):
            logger.info(f"✅ Slack message sent (ts={data.get('ts')})")
        else:
            logger.error(f"❌ Slack API error: {data.get('error')}")
        return data


def format_submitted_at(now: Optional[datetime] = None, tz_name: str = CONTACT_TIMEZONE) -> str:
    """Local timestamp shown in the contact message footer, e.g. ``3/14/2025, 9:05:00 AM``"""
    now = now or datetime.now(timezone.utc)
    local = now.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local:%M:%S} {suffix}"


def build_contact_message(
    name: str,
    email: str,
    phone: str,
    message: str,
    company: Optional[str] = None,
    submitted_at: Optional[str] = None,
) -> tuple[str, list[dict]]:
    """Build the fallback text and Block Kit layout for a contact form submission"""
    safe_name = escape_slack_text(name)
    safe_email = escape_slack_text(email)
    safe_phone = escape_slack_text(phone)

    contact_fields = [{"type": "mrkdwn", "text": f"*Phone:*\n{safe_phone}"}]
    if company:
        contact_fields.append({"type": "mrkdwn", "text": f"*Company:*\n{escape_slack_text(company)}"})

    blocks = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "📬 New Contact Form Message", "emoji": True},
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Name:*\n{safe_name}"},
                {"type": "mrkdwn", "text": f"*Email:*\n<mailto:{safe_email}|{safe_email}>"},
            ],
        },
        {"type": "section", "fields": contact_fields},
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Message:*\n{escape_slack_text(message)}"},
        },
        {"type": "divider"},
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"Submitted via contact form • {submitted_at or format_submitted_at()}",
                }
            ],
        },
    ]

    fallback_text = (
        f"New message from {safe_name} ({safe_email}, {safe_phone}): "
        f"{escape_slack_text(truncate(message, 100))}"
    )
    return fallback_text, blocks


def build_chat_relay_text(name: str, email: str, message: str) -> str:
    """Text for a follow-up chat message relayed from the website widget"""
    return f"💬 *{escape_slack_text(name)}* ({escape_slack_text(email)}):\n{escape_slack_text(message)}"
