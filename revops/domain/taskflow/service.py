"""TaskFlow service - Personal kanban business logic"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models_taskflow import TFActivity, TFComment, TFNotification, TFProject, TFTask
from ...shared.schemas import camel_to_snake
from .repository import TaskFlowRepository
from .schemas import (
    SORT_FIELDS,
    CommentCreate,
    ProjectCreate,
    ProjectUpdate,
    ReorderTasksRequest,
    TaskCreate,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_COLOR = "#00d9ff"
MAX_LIMIT = 500

# Columns that can't be cleared with an explicit null
NON_NULLABLE_TASK_FIELDS = {"title", "status", "priority", "task_type", "labels", "order", "dependencies"}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else value


def _progress(tasks: list[TFTask]) -> tuple[int, int, int]:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == "DONE")
    progress = int(completed / total * 100 + 0.5) if total else 0
    return total, completed, progress


def serialize_task(task: TFTask) -> dict:
    project = task.project
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": _lower(task.status),
        "priority": _lower(task.priority),
        "task_type": _lower(task.task_type),
        "labels": task.labels or [],
        "estimated_days": task.estimated_days,
        "order": task.order,
        "due_date": task.due_date.date().isoformat() if task.due_date else None,
        "project_id": task.project_id,
        "project": {"id": project.id, "name": project.name, "color": project.color} if project else None,
        "parent_id": task.parent_id,
        "dependencies": task.dependencies or [],
        "assignee": task.assignee_id,
        "created_by": task.creator_id,
        "created_date": _iso(task.created_at),
        "updated_date": _iso(task.updated_at),
    }


def serialize_comment(comment: TFComment) -> dict:
    return {
        "id": comment.id,
        "task_id": comment.task_id,
        "content": comment.content,
        "author_id": comment.author_id,
        "created_date": _iso(comment.created_at),
        "updated_date": _iso(comment.updated_at),
    }


def serialize_project(project: TFProject, tasks: list[TFTask]) -> dict:
    total, completed, progress = _progress(tasks)
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "color": project.color,
        "status": _lower(project.status),
        "owner_id": project.owner_id,
        "created_date": _iso(project.created_at),
        "updated_date": _iso(project.updated_at),
        "task_count": total,
        "completed_tasks": completed,
        "progress": progress,
    }


def serialize_activity(activity: TFActivity) -> dict:
    task = activity.task
    return {
        "id": activity.id,
        "type": activity.type,
        "entity_type": activity.entity_type,
        "entity_id": activity.entity_id,
        "title": activity.title,
        "description": activity.description,
        "metadata": activity.extra_data,
        "user_id": activity.user_id,
        "project_id": activity.project_id,
        "task_id": activity.task_id,
        "task": {"id": task.id, "title": task.title} if task else None,
        "created_date": _iso(activity.created_at),
    }


def serialize_notification(notification: TFNotification) -> dict:
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "read": notification.read,
        "task_id": notification.task_id,
        "user_id": notification.user_id,
        "created_date": _iso(notification.created_at),
    }


def parse_sort(sort_by: Optional[str]) -> tuple[str, bool]:
    """``-created_date`` -> (created_date, descending)"""
    sort_by = sort_by or "-created_date"
    descending = sort_by.startswith("-")
    field = sort_by.lstrip("-")
    if field not in SORT_FIELDS:
        raise HTTPException(
            status_code=400, detail=f"Invalid sortBy. Must be one of: {', '.join(SORT_FIELDS)}"
        )
    return field, descending


def clamp_limit(limit: Optional[int], default: int) -> int:
    if not limit or limit < 1:
        return default
    return min(limit, MAX_LIMIT)


class TaskFlowService:
    """Service layer for TaskFlow; every query is scoped to ``user_id``"""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self.repo = TaskFlowRepository()

    def _log_activity(self, type_: str, entity_type: str, entity_id: str, title: str, **fields) -> None:
        self.repo.add(
            self.db,
            TFActivity(
                type=type_,
                entity_type=entity_type,
                entity_id=entity_id,
                title=title,
                user_id=self.user_id,
                **fields,
            ),
        )

    def _get_task(self, task_id: str) -> TFTask:
        task = self.repo.get_task(self.db, self.user_id, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    def _get_project(self, project_id: str) -> TFProject:
        project = self.repo.get_project(self.db, self.user_id, project_id)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def list_tasks(
        self,
        project_id: Optional[str],
        status: Optional[str],
        priority: Optional[str],
        assignee_id: Optional[str],
        sort_by: Optional[str],
        limit: Optional[int],
    ) -> list[dict]:
        field, descending = parse_sort(sort_by)
        tasks = self.repo.get_tasks(
            self.db,
            self.user_id,
            project_id=project_id,
            status=status.upper() if status else None,
            priority=priority.upper() if priority else None,
            assignee_id=assignee_id,
            sort_field=field,
            descending=descending,
            limit=clamp_limit(limit, 100),
        )
        counts = self.repo.comment_counts(self.db, [t.id for t in tasks])

        return [
            {
                **serialize_task(task),
                "subtasks": [
                    {"id": s.id, "title": s.title, "status": _lower(s.status)} for s in task.subtasks
                ],
                "comment_count": counts.get(task.id, 0),
            }
            for task in tasks
        ]

    def create_task(self, data: TaskCreate) -> dict:
        if data.projectId:
            self._get_project(data.projectId)
        if data.parentId:
            self._get_task(data.parentId)

        task = self.repo.add(
            self.db,
            TFTask(
                title=data.title,
                description=data.description,
                status=data.status,
                priority=data.priority,
                task_type=data.taskType,
                labels=data.labels,
                estimated_days=data.estimatedDays,
                order=data.order,
                due_date=data.dueDate,
                project_id=data.projectId,
                parent_id=data.parentId,
                dependencies=data.dependencies,
                assignee_id=data.assigneeId,
                creator_id=self.user_id,
            ),
        )
        self._log_activity(
            "task_created",
            "task",
            task.id,
            f"Created task: {task.title}",
            project_id=task.project_id,
            task_id=task.id,
        )
        if task.assignee_id and task.assignee_id != self.user_id:
            self.repo.add(
                self.db,
                TFNotification(
                    user_id=task.assignee_id,
                    type="task_assigned",
                    title=f"New task assigned: {task.title}",
                    message=f"{self.user_id} assigned you a task",
                    task_id=task.id,
                ),
            )

        self.db.commit()
        self.db.refresh(task)
        logger.info(f"✅ TaskFlow task created: {task.id} by {self.user_id}")
        return serialize_task(task)

    def reorder_tasks(self, data: ReorderTasksRequest) -> dict:
        """Apply board positions in one transaction; any unknown id aborts the batch"""
        ids = [p.id for p in data.tasks]
        tasks = {t.id: t for t in self.repo.get_tasks_by_ids(self.db, self.user_id, ids)}
        if any(task_id not in tasks for task_id in ids):
            raise HTTPException(status_code=404, detail="Task not found")

        for position in data.tasks:
            task = tasks[position.id]
            task.status = position.status
            task.order = position.order

        self.db.commit()
        return {"success": True}

    def get_task_detail(self, task_id: str) -> dict:
        task = self._get_task(task_id)
        parent = task.parent
        return {
            **serialize_task(task),
            "parent": {"id": parent.id, "title": parent.title} if parent else None,
            "subtasks": [
                {
                    "id": s.id,
                    "title": s.title,
                    "description": s.description,
                    "status": _lower(s.status),
                    "priority": _lower(s.priority),
                }
                for s in task.subtasks
            ],
            "comments": [serialize_comment(c) for c in task.comments],
        }

    def update_task(self, task_id: str, data: TaskUpdate) -> dict:
        task = self._get_task(task_id)
        if data.projectId:
            self._get_project(data.projectId)
        if data.parentId:
            if data.parentId == task.id:
                raise HTTPException(status_code=400, detail="A task cannot be its own parent")
            self._get_task(data.parentId)

        old_status = task.status
        for key, value in data.model_dump(exclude_unset=True).items():
            column = camel_to_snake(key)
            if value is None and column in NON_NULLABLE_TASK_FIELDS:
                continue
            setattr(task, column, value)

        if data.status and data.status != old_status:
            self._log_activity(
                "task_status_changed",
                "task",
                task.id,
                f"Changed status to {data.status.lower()}",
                description=f'Task "{task.title}" moved from {old_status.lower()} to {data.status.lower()}',
                extra_data={"old_status": old_status.lower(), "new_status": data.status.lower()},
                project_id=task.project_id,
                task_id=task.id,
            )

        self.db.commit()
        self.db.refresh(task)
        return serialize_task(task)

    def delete_task(self, task_id: str) -> dict:
        task = self._get_task(task_id)
        self.repo.delete(self.db, task)
        self.db.commit()
        logger.info(f"🗑️ TaskFlow task deleted: {task_id} by {self.user_id}")
        return {"success": True}

    def add_comment(self, task_id: str, data: CommentCreate) -> dict:
        task = self._get_task(task_id)
        comment = self.repo.add(
            self.db, TFComment(task_id=task.id, content=data.content, author_id=self.user_id)
        )
        self._log_activity(
            "comment_added",
            "task",
            task.id,
            f"Commented on: {task.title}",
            description=data.content[:200],
            project_id=task.project_id,
            task_id=task.id,
        )
        self.db.commit()
        self.db.refresh(comment)
        return serialize_comment(comment)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self, status: Optional[str]) -> list[dict]:
        projects = self.repo.get_projects(self.db, self.user_id, status.upper() if status else None)
        return [serialize_project(p, p.tasks) for p in projects]

    def create_project(self, data: ProjectCreate) -> dict:
        project = self.repo.add(
            self.db,
            TFProject(
                name=data.name,
                description=data.description,
                color=data.color or DEFAULT_PROJECT_COLOR,
                status=data.status,
                owner_id=self.user_id,
            ),
        )
        self._log_activity(
            "project_created",
            "project",
            project.id,
            f"Created project: {project.name}",
            project_id=project.id,
        )
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"✅ TaskFlow project created: {project.id} by {self.user_id}")
        return serialize_project(project, [])

    def get_project_detail(self, project_id: str) -> dict:
        project = self._get_project(project_id)
        tasks = self.repo.get_project_tasks(self.db, project.id)
        counts = self.repo.comment_counts(self.db, [t.id for t in tasks])

        return {
            **serialize_project(project, tasks),
            "tasks": [
                {
                    "id": t.id,
                    "title": t.title,
                    "description": t.description,
                    "status": _lower(t.status),
                    "priority": _lower(t.priority),
                    "task_type": _lower(t.task_type),
                    "labels": t.labels or [],
                    "due_date": t.due_date.date().isoformat() if t.due_date else None,
                    "order": t.order,
                    "comment_count": counts.get(t.id, 0),
                }
                for t in tasks
            ],
        }

    def update_project(self, project_id: str, data: ProjectUpdate) -> dict:
        project = self._get_project(project_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in ("name", "status", "color"):
                continue
            setattr(project, key, value)

        self.db.commit()
        self.db.refresh(project)
        return serialize_project(project, project.tasks)

    def delete_project(self, project_id: str) -> dict:
        """Tasks in the project are deleted with it"""
        project = self._get_project(project_id)
        self.repo.delete(self.db, project)
        self.db.commit()
        logger.info(f"🗑️ TaskFlow project deleted: {project_id} by {self.user_id}")
        return {"success": True}

    # ------------------------------------------------------------------
    # Activity feed & notifications
    # ------------------------------------------------------------------

    def list_activities(self, project_id: Optional[str], task_id: Optional[str], limit: Optional[int]):
        activities = self.repo.get_activities(
            self.db, self.user_id, project_id, task_id, clamp_limit(limit, 50)
        )
        return [serialize_activity(a) for a in activities]

    def list_notifications(self, unread_only: bool, limit: Optional[int]):
        notifications = self.repo.get_notifications(
            self.db, self.user_id, unread_only, clamp_limit(limit, 20)
        )
        return [serialize_notification(n) for n in notifications]

    def mark_notifications_read(self) -> dict:
        self.repo.mark_notifications_read(self.db, self.user_id)
        return {"success": True}
