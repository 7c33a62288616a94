"""TaskFlow repository - Database operations scoped to a single user"""

from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, selectinload

from ...models_taskflow import TFActivity, TFComment, TFNotification, TFProject, TFTask
from .schemas import TASK_PRIORITIES, TASK_STATUSES


def _enum_rank(column, values: tuple[str, ...]):
    """Order an enum column by declaration order instead of alphabetically"""
    return case({value: index for index, value in enumerate(values)}, value=column, else_=len(values))


TASK_SORT_COLUMNS = {
    "created_date": TFTask.created_at,
    "updated_date": TFTask.updated_at,
    "due_date": TFTask.due_date,
    "order": TFTask.order,
    "title": TFTask.title,
    "priority": _enum_rank(TFTask.priority, TASK_PRIORITIES),
}


class TaskFlowRepository:
    """Repository for TaskFlow tasks, projects, comments, activities and notifications"""

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @staticmethod
    def get_tasks(
        db: Session,
        user_id: str,
        project_id: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assignee_id: Optional[str] = None,
        sort_field: str = "created_date",
        descending: bool = True,
        limit: int = 100,
    ) -> list[TFTask]:
        query = (
            db.query(TFTask)
            .options(selectinload(TFTask.project), selectinload(TFTask.subtasks))
            .filter(TFTask.creator_id == user_id)
        )
        if project_id:
            query = query.filter(TFTask.project_id == project_id)
        if status:
            query = query.filter(TFTask.status == status)
        if priority:
            query = query.filter(TFTask.priority == priority)
        if assignee_id:
            query = query.filter(TFTask.assignee_id == assignee_id)

        sort_column = TASK_SORT_COLUMNS[sort_field]
        primary = sort_column.desc() if descending else sort_column.asc()
        return query.order_by(primary, TFTask.order.asc()).limit(limit).all()

    @staticmethod
    def get_task(db: Session, user_id: str, task_id: str) -> Optional[TFTask]:
        return (
            db.query(TFTask)
            .filter(TFTask.id == task_id, TFTask.creator_id == user_id)
            .first()
        )

    @staticmethod
    def get_tasks_by_ids(db: Session, user_id: str, task_ids: list[str]) -> list[TFTask]:
        if not task_ids:
            return []
        return (
            db.query(TFTask)
            .filter(TFTask.id.in_(task_ids), TFTask.creator_id == user_id)
            .all()
        )

    @staticmethod
    def comment_counts(db: Session, task_ids: list[str]) -> dict[str, int]:
        if not task_ids:
            return {}
        rows = (
            db.query(TFComment.task_id, func.count(TFComment.id))
            .filter(TFComment.task_id.in_(task_ids))
            .group_by(TFComment.task_id)
            .all()
        )
        return {task_id: count for task_id, count in rows}

    @staticmethod
    def get_project_tasks(db: Session, project_id: str) -> list[TFTask]:
        """Board order: status column, then position within the column"""
        return (
            db.query(TFTask)
            .filter(TFTask.project_id == project_id)
            .order_by(_enum_rank(TFTask.status, TASK_STATUSES), TFTask.order)
            .all()
        )

    @staticmethod
    def add(db: Session, record):
        db.add(record)
        db.flush()
        return record

    @staticmethod
    def delete(db: Session, record) -> None:
        db.delete(record)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @staticmethod
    def get_projects(db: Session, user_id: str, status: Optional[str] = None) -> list[TFProject]:
        query = (
            db.query(TFProject)
            .options(selectinload(TFProject.tasks))
            .filter(TFProject.owner_id == user_id)
        )
        if status:
            query = query.filter(TFProject.status == status)
        return query.order_by(TFProject.created_at.desc()).all()

    @staticmethod
    def get_project(db: Session, user_id: str, project_id: str) -> Optional[TFProject]:
        return (
            db.query(TFProject)
            .filter(TFProject.id == project_id, TFProject.owner_id == user_id)
            .first()
        )

    # ------------------------------------------------------------------
    # Activities & notifications
    # ------------------------------------------------------------------

    @staticmethod
    def get_activities(
        db: Session,
        user_id: str,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[TFActivity]:
        query = (
            db.query(TFActivity)
            .options(selectinload(TFActivity.task))
            .filter(TFActivity.user_id == user_id)
        )
        if project_id:
            query = query.filter(TFActivity.project_id == project_id)
        if task_id:
            query = query.filter(TFActivity.task_id == task_id)
        return query.order_by(TFActivity.created_at.desc()).limit(limit).all()

    @staticmethod
    def get_notifications(
        db: Session, user_id: str, unread_only: bool = False, limit: int = 20
    ) -> list[TFNotification]:
        query = db.query(TFNotification).filter(TFNotification.user_id == user_id)
        if unread_only:
            query = query.filter(TFNotification.read.is_(False))
        return query.order_by(TFNotification.created_at.desc()).limit(limit).all()

    @staticmethod
    def mark_notifications_read(db: Session, user_id: str) -> int:
        updated = (
            db.query(TFNotification)
            .filter(TFNotification.user_id == user_id, TFNotification.read.is_(False))
            .update({"read": True}, synchronize_session=False)
        )
        db.commit()
        return updated
