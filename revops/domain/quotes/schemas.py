"""Quote schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import validate_choice, validate_email

QUOTE_STATUSES = ("draft", "sent", "accepted")


class QuoteCreate(BaseModel):
    """Quote request submitted from the pricing pages"""

    userEmail: Optional[str] = None
    companyName: Optional[str] = Field(None, max_length=255)
    firstName: Optional[str] = Field(None, max_length=100)
    lastName: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = Field(None, max_length=255)
    comments: Optional[str] = None
    packageId: Optional[str] = None
    scopingInputs: Optional[dict[str, Any]] = None
    selectedServices: Optional[list[Any]] = None
    calculatedPrice: Optional[float] = Field(None, ge=0)
    calculatedTimelineWeeks: Optional[int] = Field(None, ge=0)
    pdfUrl: Optional[str] = None
    status: str = "draft"

    @field_validator("userEmail")
    @classmethod
    def validate_user_email(cls, v):
        return validate_email(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, QUOTE_STATUSES, "status")


class QuoteUpdate(BaseModel):
    status: Optional[str] = None
    pdfUrl: Optional[str] = None
    calculatedPrice: Optional[float] = Field(None, ge=0)
    comments: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, QUOTE_STATUSES, "status")


class QuoteResponse(CamelModel):
    id: str
    user_email: Optional[str] = None
    company_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    comments: Optional[str] = None
    package_id: Optional[str] = None
    scoping_inputs: Optional[dict[str, Any]] = None
    selected_services: Optional[list[Any]] = None
    calculated_price: Optional[float] = None
    calculated_timeline_weeks: Optional[int] = None
    pdf_url: Optional[str] = None
    status: str = "draft"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
