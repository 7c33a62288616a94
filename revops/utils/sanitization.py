import re
from typing import Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def strip_control_chars(value: Optional[str]) -> Optional[str]:
    """Remove non-printable control characters, keeping tabs and newlines"""
    if value is None:
        return None
    return _CONTROL_CHARS.sub("", value)


def escape_slack_text(value: Optional[str]) -> str:
    """
    Escape user-supplied text for Slack mrkdwn.

    Slack only requires &, < and > to be escaped; anything else is rendered
    literally. Control characters are dropped.
    """
    if not value:
        return ""
    value = strip_control_chars(str(value))
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def truncate(value: str, max_length: int, suffix: str = "...") -> str:
    """Cut ``value`` to ``max_length`` characters, appending ``suffix`` when cut"""
    if len(value) <= max_length:
        return value
    return value[:max_length] + suffix
