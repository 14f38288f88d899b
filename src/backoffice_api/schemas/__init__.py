"""Pydantic schemas for API request/response validation."""

from backoffice_api.schemas.accounting_template import (
    GeneratedLineResponse,
    TemplateApplyRequest,
    TemplateApplyResponse,
    TemplateCreate,
    TemplateLineCreate,
    TemplateLineResponse,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
    TemplateValidationResponse,
)
from backoffice_api.schemas.classification import (
    BatchClassifyItem,
    BatchClassifyRequest,
    BatchClassifyResponse,
    BatchClassifyResult,
    ClassifyRequest,
    ClassifyResponse,
)

__all__ = [
    "BatchClassifyItem",
    "BatchClassifyRequest",
    "BatchClassifyResponse",
    "BatchClassifyResult",
    "ClassifyRequest",
    "ClassifyResponse",
    "GeneratedLineResponse",
    "TemplateApplyRequest",
    "TemplateApplyResponse",
    "TemplateCreate",
    "TemplateLineCreate",
    "TemplateLineResponse",
    "TemplateListResponse",
    "TemplateResponse",
    "TemplateUpdate",
    "TemplateValidationResponse",
]
