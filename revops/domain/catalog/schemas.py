"""Catalog schemas - Services and packages"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import validate_choice

PACKAGE_TYPES = ("stage", "targeted", "custom")


# ============================================================================
# SERVICES
# ============================================================================


class ServiceCreate(BaseModel):
    """Schema for creating a service"""

    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    basePrice: float = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)
    shortDescription: Optional[str] = None
    fullDescription: Optional[str] = None
    icon: Optional[str] = None
    isFeatured: bool = False
    isActive: bool = True
    displayOrder: int = 0


class ServiceUpdate(BaseModel):
    """Schema for updating a service; only sent fields change"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    basePrice: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    shortDescription: Optional[str] = None
    fullDescription: Optional[str] = None
    icon: Optional[str] = None
    isFeatured: Optional[bool] = None
    isActive: Optional[bool] = None
    displayOrder: Optional[int] = None


class ServiceResponse(CamelModel):
    id: str
    name: str
    slug: str
    short_description: Optional[str] = None
    full_description: Optional[str] = None
    base_price: float
    category: str
    icon: Optional[str] = None
    is_featured: bool = False
    is_active: bool = True
    display_order: int = 0
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# PACKAGES
# ============================================================================


class PackageFields(BaseModel):
    stage: Optional[str] = None
    targetArrMin: Optional[int] = None
    targetArrMax: Optional[int] = None
    tagline: Optional[str] = None
    shortDescription: Optional[str] = None
    fullDescription: Optional[str] = None
    discountPercentage: Optional[float] = Field(None, ge=0, le=100)
    timelineWeeksMin: Optional[int] = Field(None, ge=0)
    timelineWeeksMax: Optional[int] = Field(None, ge=0)
    icon: Optional[str] = None
    badge: Optional[str] = None
    inputsDescription: Optional[str] = None
    deliveryRhythmDescription: Optional[str] = None
    outputsDescription: Optional[str] = None
    successCriteriaDescription: Optional[str] = None
    guaranteeDescription: Optional[str] = None
    isFeatured: Optional[bool] = None
    isActive: Optional[bool] = None
    displayOrder: Optional[int] = None
    serviceIds: Optional[list[str]] = None


class PackageCreate(PackageFields):
    """Schema for creating a package"""

    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)
    type: str
    basePrice: float = Field(ge=0)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return validate_choice(v, PACKAGE_TYPES, "type")


class PackageUpdate(PackageFields):
    """Schema for updating a package; only sent fields change"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    basePrice: Optional[float] = Field(None, ge=0)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return validate_choice(v, PACKAGE_TYPES, "type")


class PackageResponse(CamelModel):
    id: str
    name: str
    slug: str
    type: str
    stage: Optional[str] = None
    target_arr_min: Optional[str] = None
    target_arr_max: Optional[str] = None
    tagline: Optional[str] = None
    short_description: Optional[str] = None
    full_description: Optional[str] = None
    base_price: float
    discount_percentage: float = 0
    timeline_weeks_min: Optional[int] = None
    timeline_weeks_max: Optional[int] = None
    icon: Optional[str] = None
    badge: Optional[str] = None
    inputs_description: Optional[str] = None
    delivery_rhythm_description: Optional[str] = None
    outputs_description: Optional[str] = None
    success_criteria_description: Optional[str] = None
    guarantee_description: Optional[str] = None
    is_featured: bool = False
    is_active: bool = True
    display_order: int = 0
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("target_arr_min", "target_arr_max", mode="before")
    @classmethod
    def bigint_to_str(cls, v):
        # ARR bounds exceed JS safe integers; serialize as strings
        return str(v) if v is not None else None

    @field_validator("discount_percentage", mode="before")
    @classmethod
    def default_discount(cls, v):
        return v or 0
