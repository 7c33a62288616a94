"""Scoping domain - Scoping factors, rules and the price calculator"""

from .router import admin_router, router

__all__ = ["router", "admin_router"]
