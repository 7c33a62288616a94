"""Scoping schemas - Quiz factors, pricing rules and the scope calculator"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.schemas import CamelModel
from ...shared.validators import validate_choice, validate_email

INPUT_TYPES = ("select", "number", "boolean", "range")
OPERATORS = ("equals", "greater_than", "less_than", "in_range", "contains")
PRICE_ADJUSTMENT_TYPES = ("multiplier", "fixed_add", "fixed_subtract")


class FactorOption(BaseModel):
    value: Any
    label: str


# ============================================================================
# FACTORS
# ============================================================================


class ScopingFactorCreate(BaseModel):
    """Schema for creating a scoping factor"""

    packageId: str = Field(min_length=1)
    factorKey: str = Field(min_length=1, max_length=100)
    questionText: str = Field(min_length=1, max_length=500)
    inputType: str
    helpText: Optional[str] = None
    options: Optional[list[FactorOption]] = None
    isRequired: Optional[bool] = None
    displayOrder: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("inputType")
    @classmethod
    def validate_input_type(cls, v):
        return validate_choice(v, INPUT_TYPES, "inputType")


class ScopingFactorUpdate(BaseModel):
    """Schema for updating a scoping factor"""

    factorKey: Optional[str] = Field(None, min_length=1, max_length=100)
    questionText: Optional[str] = Field(None, min_length=1, max_length=500)
    inputType: Optional[str] = None
    helpText: Optional[str] = None
    options: Optional[list[FactorOption]] = None
    isRequired: Optional[bool] = None
    displayOrder: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("inputType")
    @classmethod
    def validate_input_type(cls, v):
        return validate_choice(v, INPUT_TYPES, "inputType")


class ScopingFactorResponse(CamelModel):
    id: str
    package_id: str
    factor_key: str
    question_text: str
    help_text: Optional[str] = None
    input_type: str
    options: Optional[list[dict[str, Any]]] = None
    is_required: bool = True
    display_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# RULES
# ============================================================================


class ScopingRuleFields(BaseModel):
    priceAdjustmentType: Optional[str] = None
    priceAdjustmentValue: Optional[float] = None
    timelineAdjustmentWeeks: Optional[int] = None
    adjustmentLabel: Optional[str] = None
    priority: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("priceAdjustmentType")
    @classmethod
    def validate_adjustment_type(cls, v):
        return validate_choice(v, PRICE_ADJUSTMENT_TYPES, "priceAdjustmentType")


class ScopingRuleCreate(ScopingRuleFields):
    """Schema for creating a scoping rule"""

    packageId: str = Field(min_length=1)
    ruleName: str = Field(min_length=1, max_length=255)
    factorKey: str = Field(min_length=1, max_length=100)
    operator: str
    conditionValue: Any

    @field_validator("operator")
    @classmethod
    def validate_operator(cls, v):
        return validate_choice(v, OPERATORS, "operator")

    @field_validator("conditionValue")
    @classmethod
    def require_condition_value(cls, v):
        if v is None:
            raise ValueError("conditionValue is required")
        return v


class ScopingRuleUpdate(ScopingRuleFields):
    """Schema for updating a scoping rule"""

    ruleName: Optional[str] = Field(None, min_length=1, max_length=255)
    factorKey: Optional[str] = Field(None, min_length=1, max_length=100)
    operator: Optional[str] = None
    conditionValue: Optional[Any] = None

    @field_validator("operator")
    @classmethod
    def validate_operator(cls, v):
        return validate_choice(v, OPERATORS, "operator")


class ScopingRuleResponse(CamelModel):
    id: str
    package_id: str
    rule_name: str
    factor_key: str
    operator: str
    condition_value: Any = None
    price_adjustment_type: Optional[str] = None
    price_adjustment_value: Optional[float] = None
    timeline_adjustment_weeks: int = 0
    adjustment_label: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# CALCULATOR
# ============================================================================


class CalculateScopeRequest(BaseModel):
    """Request body for POST /api/calculate-scope"""

    packageId: str = Field(min_length=1)
    inputs: dict[str, Any]
    saveQuote: bool = False
    userEmail: Optional[str] = None
    companyName: Optional[str] = None

    @field_validator("userEmail")
    @classmethod
    def validate_user_email(cls, v):
        return validate_email(v)

    @model_validator(mode="after")
    def require_email_for_quote(self):
        if self.saveQuote and not self.userEmail:
            raise ValueError("userEmail is required when saveQuote=true")
        return self
