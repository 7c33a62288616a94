"""Audit domain - Append-only log of admin changes"""

from .router import router

__all__ = ["router"]
