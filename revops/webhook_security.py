"""
Webhook Security Module

Signature verification for inbound webhooks (Slack Events API):
- Constant-time signature comparison
- Timestamp validation against replayed requests
- Verification runs on the raw request body before JSON parsing
"""

import hashlib
import hmac
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request

from .config import get_slack_signing_secret

logger = logging.getLogger(__name__)

# Maximum age of webhook in seconds (5 minutes)
MAX_WEBHOOK_AGE_SECONDS = 300

SLACK_SIGNATURE_VERSION = "v0"


def constant_time_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Header values may hold non-ASCII characters, so both sides are compared as UTF-8 bytes.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_timestamp(timestamp: Optional[str], max_age: int = MAX_WEBHOOK_AGE_SECONDS) -> bool:
    """
    Verify webhook timestamp is within acceptable range.

    Args:
        timestamp: Unix timestamp as string
        max_age: Maximum age in seconds

    Returns:
        True if timestamp is valid, False otherwise
    """
    if not timestamp:
        return False

    try:
        webhook_time = int(timestamp)
        age = abs(int(time.time()) - webhook_time)

        if age > max_age:
            logger.warning(f"🚫 Webhook timestamp too old: {age}s (max: {max_age}s)")
            return False

        return True
    except (ValueError, TypeError):
        logger.warning(f"🚫 Invalid webhook timestamp format: {timestamp}")
        return False


def compute_slack_signature(secret: str, timestamp: str, body: bytes) -> str:
    """Slack signs ``v0:{timestamp}:{raw body}`` and prefixes the hex digest with ``v0=``"""
    base_string = f"{SLACK_SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    return f"{SLACK_SIGNATURE_VERSION}={compute_hmac_sha256(secret, base_string)}"


async def verify_slack_request(request: Request) -> bytes:
    """
    Verify a Slack Events API request and return its raw body.

    When SLACK_SIGNING_SECRET is not configured the request is accepted as-is.
    """
    raw_body = await request.body()
    secret = get_slack_signing_secret()

    if not secret:
        logger.warning("⚠️ SLACK_SIGNING_SECRET not set - skipping Slack signature verification")
        return raw_body

    signature = request.headers.get("X-Slack-Signature", "")
    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")

    if not signature or not timestamp:
        logger.error("❌ Missing Slack signature headers")
        raise HTTPException(status_code=401, detail="Missing Slack signature")

    if not verify_timestamp(timestamp):
        logger.error("❌ Slack request timestamp expired or invalid")
        raise HTTPException(status_code=401, detail="Slack request expired")

    expected = compute_slack_signature(secret, timestamp, raw_body)
    if not constant_time_compare(signature, expected):
        logger.error("❌ Slack signature mismatch")
        raise HTTPException(status_code=401, detail="Invalid Slack signature")

    logger.info("✅ Slack signature verified")
    return raw_body
