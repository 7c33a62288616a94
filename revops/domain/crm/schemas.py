"""CRM schemas - Companies, contacts, deals, projects, tasks and activities"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import as_naive_utc, validate_choice, validate_email

COMPANY_STATUSES = ("active", "inactive", "archived")
CONTACT_STATUSES = ("active", "inactive")
DEAL_STAGES = ("lead", "qualified", "proposal", "negotiation", "closed_won", "closed_lost")
CLOSED_DEAL_STAGES = ("closed_won", "closed_lost")
PROJECT_STATUSES = ("planning", "in_progress", "on_hold", "completed", "cancelled")
TASK_STATUSES = ("todo", "in_progress", "blocked", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")
ACTIVITY_TYPES = ("note", "call", "email", "meeting", "task", "stage_change")


class CRMRequest(BaseModel):
    """Base for CRM request bodies; datetimes are stored as naive UTC"""

    @field_validator("*", mode="after")
    @classmethod
    def normalize_datetimes(cls, v):
        if isinstance(v, datetime):
            return as_naive_utc(v)
        return v


# ============================================================================
# COMPANIES
# ============================================================================


class CompanyFields(CRMRequest):
    website: Optional[str] = Field(None, max_length=500)
    industry: Optional[str] = Field(None, max_length=100)
    size: Optional[str] = Field(None, max_length=50)
    arrRange: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    postalCode: Optional[str] = Field(None, max_length=20)
    status: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, COMPANY_STATUSES, "status")


class CompanyCreate(CompanyFields):
    name: str = Field(min_length=1, max_length=255)


class CompanyUpdate(CompanyFields):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class CompanyResponse(CamelModel):
    id: str
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    arr_range: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    status: str = "active"
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# CONTACTS
# ============================================================================


class ContactFields(CRMRequest):
    companyId: Optional[str] = None
    conversationId: Optional[int] = None
    phone: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = Field(None, max_length=255)
    linkedinUrl: Optional[str] = Field(None, max_length=500)
    isPrimary: Optional[bool] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, CONTACT_STATUSES, "status")


class ContactCreate(ContactFields):
    firstName: str = Field(min_length=1, max_length=100)
    lastName: str = Field(min_length=1, max_length=100)
    email: str

    @field_validator("email")
    @classmethod
    def validate_contact_email(cls, v):
        return validate_email(v)


class ContactUpdate(ContactFields):
    firstName: Optional[str] = Field(None, min_length=1, max_length=100)
    lastName: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_contact_email(cls, v):
        return validate_email(v)


class ContactResponse(CamelModel):
    id: str
    company_id: Optional[str] = None
    conversation_id: Optional[int] = None
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    title: Optional[str] = None
    linkedin_url: Optional[str] = None
    is_primary: bool = False
    status: str = "active"
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# DEALS
# ============================================================================


class DealFields(CRMRequest):
    contactId: Optional[str] = None
    quoteId: Optional[str] = None
    description: Optional[str] = None
    value: Optional[float] = Field(None, ge=0)
    stage: Optional[str] = None
    probability: Optional[int] = Field(None, ge=0, le=100)
    expectedCloseDate: Optional[datetime] = None
    actualCloseDate: Optional[datetime] = None
    lossReason: Optional[str] = Field(None, max_length=1000)

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, v):
        return validate_choice(v, DEAL_STAGES, "stage")


class DealCreate(DealFields):
    companyId: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)


class DealUpdate(DealFields):
    companyId: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class DealStageChange(BaseModel):
    stage: str
    lossReason: Optional[str] = Field(None, max_length=1000)

    @field_validator("stage")
    @classmethod
    def validate_stage(cls, v):
        return validate_choice(v, DEAL_STAGES, "stage")


class DealResponse(CamelModel):
    id: str
    company_id: str
    contact_id: Optional[str] = None
    quote_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    value: Optional[float] = None
    stage: str = "lead"
    probability: Optional[int] = None
    expected_close_date: Optional[datetime] = None
    actual_close_date: Optional[datetime] = None
    loss_reason: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# PROJECTS
# ============================================================================


class ProjectFields(CRMRequest):
    dealId: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    dueDate: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)
    progressPercent: Optional[int] = Field(None, ge=0, le=100)
    notes: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, PROJECT_STATUSES, "status")


class ProjectCreate(ProjectFields):
    companyId: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)


class ProjectUpdate(ProjectFields):
    companyId: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class ProjectResponse(CamelModel):
    id: str
    company_id: str
    deal_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    status: str = "planning"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    budget: Optional[float] = None
    progress_percent: int = 0
    notes: Optional[str] = None
    tags: Optional[list[str]] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# TASKS
# ============================================================================


class TaskFields(CRMRequest):
    projectId: Optional[str] = None
    dealId: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    dueDate: Optional[datetime] = None
    assignedTo: Optional[str] = Field(None, max_length=255)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, TASK_STATUSES, "status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return validate_choice(v, TASK_PRIORITIES, "priority")


class TaskCreate(TaskFields):
    # Checked in the service for a specific error message
    title: Optional[str] = Field(None, max_length=500)


class TaskUpdate(TaskFields):
    title: Optional[str] = Field(None, min_length=1, max_length=500)


class TaskResponse(CamelModel):
    id: str
    project_id: Optional[str] = None
    deal_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: str = "todo"
    priority: str = "medium"
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# ACTIVITIES
# ============================================================================


class ActivityCreate(CRMRequest):
    type: str
    subject: str = Field(min_length=1, max_length=500)
    companyId: Optional[str] = None
    contactId: Optional[str] = None
    dealId: Optional[str] = None
    projectId: Optional[str] = None
    description: Optional[str] = None
    activityDate: Optional[datetime] = None
    durationMinutes: Optional[int] = Field(None, ge=0)
    metadata: Optional[dict[str, Any]] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return validate_choice(v, ACTIVITY_TYPES, "type")


class ActivityResponse(CamelModel):
    id: str
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None
    project_id: Optional[str] = None
    type: str
    subject: str
    description: Optional[str] = None
    activity_date: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    extra_data: Optional[dict[str, Any]] = Field(None, serialization_alias="metadata")
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
