from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from .models import generate_uuid, utcnow


class TFProject(Base):
    __tablename__ = "tf_projects"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), default="#00d9ff")
    status = Column(String(20), default="ACTIVE")  # ACTIVE, ARCHIVED, COMPLETED
    owner_id = Column(String(255), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    tasks = relationship("TFTask", back_populates="project", cascade="all, delete-orphan")


class TFTask(Base):
    __tablename__ = "tf_tasks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="TODO", index=True)
    priority = Column(String(20), default="MEDIUM")
    task_type = Column(String(20), default="TASK")
    labels = Column(JSON, default=list)
    estimated_days = Column(Integer, nullable=True)
    order = Column(Integer, default=0)
    due_date = Column(DateTime, nullable=True)
    project_id = Column(
        String(36), ForeignKey("tf_projects.id", ondelete="CASCADE"), index=True, nullable=True
    )
    parent_id = Column(
        String(36), ForeignKey("tf_tasks.id", ondelete="SET NULL"), index=True, nullable=True
    )
    dependencies = Column(JSON, default=list)
    assignee_id = Column(String(255), nullable=True)
    creator_id = Column(String(255), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("TFProject", back_populates="tasks")
    parent = relationship("TFTask", remote_side=[id], back_populates="subtasks")
    subtasks = relationship("TFTask", back_populates="parent")
    comments = relationship(
        "TFComment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TFComment.created_at.desc()",
    )


class TFComment(Base):
    __tablename__ = "tf_comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    task_id = Column(
        String(36), ForeignKey("tf_tasks.id", ondelete="CASCADE"), index=True, nullable=False
    )
    content = Column(Text, nullable=False)
    author_id = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    task = relationship("TFTask", back_populates="comments")


class TFActivity(Base):
    __tablename__ = "tf_activities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String(50), nullable=False)
    entity_type = Column(String(20), nullable=False)  # task, project
    entity_id = Column(String(36), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    extra_data = Column("metadata", JSON, nullable=True)
    user_id = Column(String(255), index=True, nullable=False)
    project_id = Column(String(36), nullable=True)
    task_id = Column(String(36), ForeignKey("tf_tasks.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    task = relationship("TFTask")


class TFNotification(Base):
    __tablename__ = "tf_notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(255), index=True, nullable=False)
    type = Column(String(50), nullable=False)
    title = Column(String(500), nullable=False)
    message = Column(Text, nullable=True)
    read = Column(Boolean, default=False)
    task_id = Column(String(36), ForeignKey("tf_tasks.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
