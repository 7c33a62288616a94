"""TaskFlow domain - Personal kanban tasks, projects, activity and notifications"""

from .router import router

__all__ = ["router"]
