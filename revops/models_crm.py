from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base
from .models import generate_uuid, utcnow


class Company(Base):
    __tablename__ = "crm_companies"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), index=True, nullable=False)
    website = Column(String(500), nullable=True)
    industry = Column(String(100), index=True, nullable=True)
    size = Column(String(50), nullable=True)
    arr_range = Column(String(50), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    status = Column(String(20), default="active", index=True)  # active, inactive, archived
    notes = Column(Text, nullable=True)
    tags = Column(JSON, default=list)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    contacts = relationship("Contact", back_populates="company")
    deals = relationship("Deal", back_populates="company")
    projects = relationship("Project", back_populates="company")


class Contact(Base):
    __tablename__ = "crm_contacts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("crm_companies.id"), index=True, nullable=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    title = Column(String(255), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    is_primary = Column(Boolean, default=False)
    status = Column(String(20), default="active")  # active, inactive
    notes = Column(Text, nullable=True)
    tags = Column(JSON, default=list)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="contacts")


class Deal(Base):
    __tablename__ = "crm_deals"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("crm_companies.id"), index=True, nullable=False)
    contact_id = Column(String(36), ForeignKey("crm_contacts.id"), nullable=True)
    quote_id = Column(String(36), ForeignKey("quotes.id"), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    value = Column(Float, nullable=True)
    stage = Column(String(20), default="lead", index=True)
    probability = Column(Integer, nullable=True)
    expected_close_date = Column(DateTime, nullable=True)
    actual_close_date = Column(DateTime, nullable=True)
    loss_reason = Column(String(1000), nullable=True)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="deals")


class Project(Base):
    __tablename__ = "crm_projects"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("crm_companies.id"), index=True, nullable=False)
    deal_id = Column(String(36), ForeignKey("crm_deals.id"), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="planning", index=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)
    budget = Column(Float, nullable=True)
    progress_percent = Column(Integer, default=0)
    notes = Column(Text, nullable=True)
    tags = Column(JSON, default=list)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="projects")
    tasks = relationship("Task", back_populates="project")


class Task(Base):
    __tablename__ = "crm_tasks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    project_id = Column(String(36), ForeignKey("crm_projects.id"), index=True, nullable=True)
    deal_id = Column(String(36), ForeignKey("crm_deals.id"), nullable=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="todo", index=True)
    priority = Column(String(20), default="medium")
    due_date = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    assigned_to = Column(String(255), nullable=True)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    project = relationship("Project", back_populates="tasks")


class Activity(Base):
    __tablename__ = "crm_activities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    company_id = Column(String(36), ForeignKey("crm_companies.id"), index=True, nullable=True)
    contact_id = Column(String(36), ForeignKey("crm_contacts.id"), nullable=True)
    deal_id = Column(String(36), ForeignKey("crm_deals.id"), nullable=True)
    project_id = Column(String(36), ForeignKey("crm_projects.id"), nullable=True)
    type = Column(String(20), nullable=False)  # note, call, email, meeting, task, stage_change
    subject = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    activity_date = Column(DateTime, default=utcnow, index=True)
    duration_minutes = Column(Integer, nullable=True)
    # "metadata" is reserved on declarative classes
    extra_data = Column("metadata", JSON, nullable=True)
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
