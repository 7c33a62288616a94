"""TaskFlow router - Personal kanban API"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_taskflow_user
from ...database import get_db
from .schemas import (
    CommentCreate,
    ProjectCreate,
    ProjectUpdate,
    ReorderTasksRequest,
    TaskCreate,
    TaskUpdate,
)
from .service import TaskFlowService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/taskflow", tags=["TaskFlow"])


def get_taskflow_service(
    db: Session = Depends(get_db), user_id: str = Depends(get_taskflow_user)
) -> TaskFlowService:
    """Dependency injection for TaskFlowService bound to the current user"""
    return TaskFlowService(db, user_id)


# ============================================================================
# TASKS
# ============================================================================


@router.get("/tasks")
async def list_tasks(
    projectId: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    assigneeId: Optional[str] = Query(None),
    sortBy: Optional[str] = Query("-created_date"),
    limit: Optional[int] = Query(100),
    service: TaskFlowService = Depends(get_taskflow_service),
):
    return service.list_tasks(projectId, status, priority, assigneeId, sortBy, limit)


@router.post("/tasks", status_code=201)
async def create_task(data: TaskCreate, service: TaskFlowService = Depends(get_taskflow_service)):
    return service.create_task(data)


@router.patch("/tasks")
async def reorder_tasks(
    data: ReorderTasksRequest, service: TaskFlowService = Depends(get_taskflow_service)
):
    """Batch update of board positions after a drag and drop"""
    return service.reorder_tasks(data)


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, service: TaskFlowService = Depends(get_taskflow_service)):
    return service.get_task_detail(task_id)


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: str, data: TaskUpdate, service: TaskFlowService = Depends(get_taskflow_service)
):
    return service.update_task(task_id, data)


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, service: TaskFlowService = Depends(get_taskflow_service)):
    return service.delete_task(task_id)


@router.post("/tasks/{task_id}/comments", status_code=201)
async def add_comment(
    task_id: str, data: CommentCreate, service: TaskFlowService = Depends(get_taskflow_service)
):
    return service.add_comment(task_id, data)


# ============================================================================
# PROJECTS
# ============================================================================


@router.get("/projects")
async def list_projects(
    status: Optional[str] = Query(None),
    service: TaskFlowService = Depends(get_taskflow_service),
):
    return service.list_projects(status)


@router.post("/projects", status_code=201)
async def create_project(
    data: ProjectCreate, service: TaskFlowService = Depends(get_taskflow_service)
):
    return service.create_project(data)


@router.get("/projects/{project_id}")
async def get_project(project_id: str, service: TaskFlowService = Depends(get_taskflow_service)):
    return service.get_project_detail(project_id)


@router.patch("/projects/{project_id}")
async def update_project(
    project_id: str, data: ProjectUpdate, service: TaskFlowService = Depends(get_taskflow_service)
):
    return service.update_project(project_id, data)


@router.delete("/projects/{project_id}")
async def delete_project(project_id: str, service: TaskFlowService = Depends(get_taskflow_service)):
    return service.delete_project(project_id)


# ============================================================================
# ACTIVITY & NOTIFICATIONS
# ============================================================================


@router.get("/activities")
async def list_activities(
    projectId: Optional[str] = Query(None),
    taskId: Optional[str] = Query(None),
    limit: Optional[int] = Query(50),
    service: TaskFlowService = Depends(get_taskflow_service),
):
    return service.list_activities(projectId, taskId, limit)


@router.get("/notifications")
async def list_notifications(
    unread: Optional[str] = Query(None),
    limit: Optional[int] = Query(20),
    service: TaskFlowService = Depends(get_taskflow_service),
):
    return service.list_notifications(unread == "true", limit)


@router.patch("/notifications")
async def mark_notifications_read(service: TaskFlowService = Depends(get_taskflow_service)):
    """Mark all of the user's notifications as read"""
    return service.mark_notifications_read()
