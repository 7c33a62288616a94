"""TaskFlow schemas - Personal kanban tasks, projects and comments"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import as_naive_utc, validate_choice, validate_uuid

TASK_STATUSES = ("BACKLOG", "TODO", "IN_PROGRESS", "IN_REVIEW", "DONE")
TASK_PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")
TASK_TYPES = ("STORY", "TASK", "SUBTASK", "BUG")
PROJECT_STATUSES = ("ACTIVE", "ARCHIVED", "COMPLETED")

SORT_FIELDS = ("created_date", "updated_date", "due_date", "order", "title", "priority")


def normalize_enum(value: Optional[str], choices: tuple[str, ...], field: str) -> Optional[str]:
    """Case-insensitive enum input, stored upper-case"""
    if value is None:
        return None
    return validate_choice(value.strip().upper(), choices, field)


def require_uuid(value: Optional[str], field: str) -> Optional[str]:
    if value is not None and not validate_uuid(value):
        raise ValueError(f"{field} must be a valid UUID")
    return value


class TaskFields(BaseModel):
    description: Optional[str] = None
    estimatedDays: Optional[int] = Field(None, gt=0)
    dueDate: Optional[datetime] = None
    projectId: Optional[str] = None
    parentId: Optional[str] = None
    assigneeId: Optional[str] = Field(None, max_length=255)

    @field_validator("dueDate")
    @classmethod
    def normalize_due_date(cls, v):
        return as_naive_utc(v)

    @field_validator("projectId", "parentId")
    @classmethod
    def validate_ids(cls, v, info):
        return require_uuid(v, info.field_name)


class TaskCreate(TaskFields):
    title: str = Field(min_length=1, max_length=500)
    status: str = "TODO"
    priority: str = "MEDIUM"
    taskType: str = "TASK"
    labels: list[str] = Field(default_factory=list)
    order: int = 0
    dependencies: list[str] = Field(default_factory=list)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return normalize_enum(v, TASK_STATUSES, "status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return normalize_enum(v, TASK_PRIORITIES, "priority")

    @field_validator("taskType")
    @classmethod
    def validate_task_type(cls, v):
        return normalize_enum(v, TASK_TYPES, "taskType")

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v):
        for task_id in v:
            require_uuid(task_id, "dependencies")
        return v


class TaskUpdate(TaskFields):
    """Partial update; only fields present in the body are applied"""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[str] = None
    priority: Optional[str] = None
    taskType: Optional[str] = None
    labels: Optional[list[str]] = None
    order: Optional[int] = None
    dependencies: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return normalize_enum(v, TASK_STATUSES, "status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return normalize_enum(v, TASK_PRIORITIES, "priority")

    @field_validator("taskType")
    @classmethod
    def validate_task_type(cls, v):
        return normalize_enum(v, TASK_TYPES, "taskType")

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v):
        for task_id in v or []:
            require_uuid(task_id, "dependencies")
        return v


class TaskPosition(BaseModel):
    id: str
    status: str
    order: int

    @field_validator("id")
    @classmethod
    def validate_id(cls, v):
        return require_uuid(v, "id")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return normalize_enum(v, TASK_STATUSES, "status")


class ReorderTasksRequest(BaseModel):
    tasks: list[TaskPosition]


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    status: str = "ACTIVE"

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return normalize_enum(v, PROJECT_STATUSES, "status")


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return normalize_enum(v, PROJECT_STATUSES, "status")
