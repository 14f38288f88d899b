"""FastAPI router for bank transaction classification endpoints."""

from fastapi import APIRouter

from backoffice_api.schemas.classification import (
    BatchClassifyRequest,
    BatchClassifyResponse,
    BatchClassifyResult,
    ClassifyRequest,
    ClassifyResponse,
)
from backoffice_api.services.transaction_classifier import classify, classify_batch

router = APIRouter()


@router.post("/classify", response_model=ClassifyResponse)
async def classify_transaction(request: ClassifyRequest) -> ClassifyResponse:
    """Classify one bank-statement line."""
    return ClassifyResponse(
        transaction_type=classify(request.description, request.amount)
    )


@router.post("/classify/batch", response_model=BatchClassifyResponse)
async def classify_transactions(request: BatchClassifyRequest) -> BatchClassifyResponse:
    """Classify many bank-statement lines.

    Keys are echoed back in request order; a repeated key keeps the
    classification of its last occurrence.
    """
    types = classify_batch(
        (item.key, item.description, item.amount) for item in request.items
    )
    results = [
        BatchClassifyResult(key=item.key, transaction_type=types[item.key])
        for item in request.items
    ]
    return BatchClassifyResponse(results=results, total=len(results))
