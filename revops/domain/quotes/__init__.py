"""Quotes domain - Saved quotes from the scoping calculator"""

from .router import router

__all__ = ["router"]
