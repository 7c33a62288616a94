"""CRM domain - Companies, contacts, deals, projects, tasks and activities"""

from .router import router

__all__ = ["router"]
