"""Pydantic schemas for accounting entry template API."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backoffice_api.models.accounting_entry_template import (
    ApplicationType,
    CalculationBase,
    MovementType,
    TemplateCurrency,
    TemplateFilter,
)

# --- Line Schemas ---


class TemplateLineCreate(BaseModel):
    """A template line as sent by the client."""

    account_code: str = ""
    movement_type: MovementType = MovementType.DEBIT
    application_type: ApplicationType = ApplicationType.FIXED_AMOUNT
    calculation_base: CalculationBase | None = None
    value: Decimal | None = None
    execution_order: int = 1


class TemplateLineResponse(BaseModel):
    """Response with template line details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    account_code: str
    movement_type: str
    application_type: str
    calculation_base: str | None = None
    value: Decimal | None = None
    execution_order: int


# --- Template Schemas ---


class TemplateCreate(BaseModel):
    """Request to create an accounting entry template."""

    template_number: str = ""
    name: str = ""
    filter: TemplateFilter | None = TemplateFilter.BOTH
    currency: TemplateCurrency | None = TemplateCurrency.ALL
    transaction_type: str = ""
    document: str | None = None
    condition: dict[str, Any] = Field(
        default_factory=dict, description="Condition tree in wire format"
    )
    description: str | None = None
    is_active: bool = True
    lines: list[TemplateLineCreate] = Field(default_factory=list)


class TemplateUpdate(BaseModel):
    """Request to update a template. Omitted fields keep their value."""

    template_number: str | None = None
    name: str | None = None
    filter: TemplateFilter | None = None
    currency: TemplateCurrency | None = None
    transaction_type: str | None = None
    document: str | None = None
    condition: dict[str, Any] | None = None
    description: str | None = None
    is_active: bool | None = None
    lines: list[TemplateLineCreate] | None = None


class TemplateResponse(BaseModel):
    """Response with template details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: str
    template_number: str
    name: str
    filter: str
    currency: str
    transaction_type: str
    document: str | None = None
    condition: dict[str, Any]
    description: str | None = None
    is_active: bool
    lines: list[TemplateLineResponse]
    created_at: datetime
    updated_at: datetime


class TemplateListResponse(BaseModel):
    """Response with list of templates."""

    templates: list[TemplateResponse]
    total: int


# --- Validation Schemas ---


class TemplateValidationResponse(BaseModel):
    """Line totals and validation errors for a template form."""

    debit: Decimal
    credit: Decimal
    balanced: bool
    errors: list[str]
    can_submit: bool


# --- Application Schemas ---


class TemplateApplyRequest(BaseModel):
    """Record to apply a template to."""

    record: dict[str, Any] = Field(
        ..., description="Flat record: amount, currency, document_kind, supplier, ..."
    )


class GeneratedLineResponse(BaseModel):
    account_code: str
    movement_type: str
    amount: Decimal
    execution_order: int


class TemplateApplyResponse(BaseModel):
    """Whether the template matched, and the lines it generated."""

    template_id: int | None
    matched: bool
    lines: list[GeneratedLineResponse]
