"""Pydantic schemas for the transaction classification API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from backoffice_api.services.transaction_classifier import TransactionType


class ClassifyRequest(BaseModel):
    """Request to classify one bank-statement line."""

    description: str = Field(..., description="Bank-statement description")
    amount: Decimal = Field(..., description="Signed amount (negative = expense)")


class ClassifyResponse(BaseModel):
    """Classifier output for one line."""

    transaction_type: TransactionType


class BatchClassifyItem(BaseModel):
    """One line of a batch classification request."""

    key: str = Field(..., description="Caller-side identifier echoed back")
    description: str
    amount: Decimal


class BatchClassifyRequest(BaseModel):
    """Request to classify many lines."""

    items: list[BatchClassifyItem]


class BatchClassifyResult(BaseModel):
    key: str
    transaction_type: TransactionType


class BatchClassifyResponse(BaseModel):
    """Classifier output for a batch, in request order."""

    results: list[BatchClassifyResult]
    total: int
