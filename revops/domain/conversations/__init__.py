"""Conversations domain - Contact form and chat relay through Slack"""

from .router import router

__all__ = ["router"]
