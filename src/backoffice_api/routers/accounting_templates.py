"""FastAPI router for accounting entry template endpoints."""

import logging
from typing import Annotated, Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice_api.db.session import DbSession, get_db
from backoffice_api.models.accounting_entry_template import (
    AccountingEntryTemplate,
    AccountingEntryTemplateLine,
)
from backoffice_api.repositories.accounting_entry_template_repository import (
    AccountingEntryTemplateNotFoundError,
    AccountingEntryTemplateRepository,
)
from backoffice_api.schemas.accounting_template import (
    GeneratedLineResponse,
    TemplateApplyRequest,
    TemplateApplyResponse,
    TemplateCreate,
    TemplateLineCreate,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
    TemplateValidationResponse,
)
from backoffice_api.services.template_application_service import (
    TemplateApplicationService,
)
from backoffice_api.services.template_lines import TemplateLineDraft
from backoffice_api.services.template_validation import (
    TemplateForm,
    compute_line_totals,
    validate_template_form,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_REQUIRED_TEXT_FIELDS = ("template_number", "name", "transaction_type")
_OPTIONAL_TEXT_FIELDS = ("document", "description")

# Unique-index violations name the index (SQL Server, PostgreSQL) or the
# columns (SQLite).
_DUPLICATE_NUMBER_MARKERS = (
    "UQ_accounting_entry_templates_number",
    "accounting_entry_templates.template_number",
)


def get_template_repo(
    db: Session = Depends(get_db),  # noqa: B008
) -> AccountingEntryTemplateRepository:
    """Get accounting entry template repository."""
    return AccountingEntryTemplateRepository(db)


def get_application_service() -> TemplateApplicationService:
    """Get template application service."""
    return TemplateApplicationService()


def _drafts_from_request(lines: list[TemplateLineCreate]) -> list[TemplateLineDraft]:
    return [
        TemplateLineDraft(
            account_code=line.account_code,
            movement_type=line.movement_type,
            application_type=line.application_type,
            calculation_base=line.calculation_base,
            value=line.value,
            execution_order=line.execution_order,
        )
        for line in lines
    ]


def _drafts_from_model(
    lines: list[AccountingEntryTemplateLine],
) -> list[TemplateLineDraft]:
    return [
        TemplateLineDraft(
            account_code=line.account_code,
            movement_type=line.movement_type,  # type: ignore[arg-type]
            application_type=line.application_type,  # type: ignore[arg-type]
            calculation_base=line.calculation_base,  # type: ignore[arg-type]
            value=line.value,
            execution_order=line.execution_order,
        )
        for line in lines
    ]


def _raise_if_invalid(form: TemplateForm) -> None:
    errors = validate_template_form(form)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": errors},
        )


def _get_or_404(
    repo: AccountingEntryTemplateRepository, template_id: int
) -> AccountingEntryTemplate:
    try:
        return repo.get(template_id)
    except AccountingEntryTemplateNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e


def _normalize_text_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Strip required text fields and turn blank optional ones into None."""
    normalized = dict(fields)
    for name in _REQUIRED_TEXT_FIELDS:
        if normalized.get(name) is not None:
            normalized[name] = normalized[name].strip()
    for name in _OPTIONAL_TEXT_FIELDS:
        if name in normalized:
            normalized[name] = (normalized[name] or "").strip() or None
    return normalized


def _raise_conflict(db: Session, error: IntegrityError) -> NoReturn:
    db.rollback()
    message = str(error.orig)
    logger.warning("Template write rejected by database: %s", message)
    if any(marker in message for marker in _DUPLICATE_NUMBER_MARKERS):
        detail = "Template number already exists for this company"
    else:
        detail = "Template conflicts with existing data"
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    ) from error


# --- Template Endpoints ---


@router.get("/company/{company_id}", response_model=TemplateListResponse)
async def list_templates(
    company_id: str,
    repo: Annotated[AccountingEntryTemplateRepository, Depends(get_template_repo)],
    active_only: bool = Query(False, description="Only return active templates"),
) -> TemplateListResponse:
    """List a company's templates."""
    templates = repo.list_by_company(company_id, active_only=active_only)
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(t) for t in templates],
        total=len(templates),
    )


@router.post(
    "/company/{company_id}",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_template(
    company_id: str,
    request: TemplateCreate,
    db: DbSession,
    repo: Annotated[AccountingEntryTemplateRepository, Depends(get_template_repo)],
) -> TemplateResponse:
    """Create a template after validating the form.

    Rejected with 422 and the list of errors when the form is incomplete or
    the lines are not balanced.
    """
    lines = _drafts_from_request(request.lines)
    _raise_if_invalid(
        TemplateForm(
            template_number=request.template_number,
            name=request.name,
            transaction_type=request.transaction_type,
            filter=request.filter,
            currency=request.currency,
            lines=lines,
        )
    )

    try:
        template = repo.create(
            company_id=company_id,
            lines=lines,
            **_normalize_text_fields(request.model_dump(exclude={"lines"})),
        )
        db.commit()
    except IntegrityError as e:
        _raise_conflict(db, e)
    db.refresh(template)
    logger.info(
        "Created accounting entry template %s for company %s",
        template.template_number,
        company_id,
    )
    return TemplateResponse.model_validate(template)


@router.post("/validate", response_model=TemplateValidationResponse)
async def validate_template(request: TemplateCreate) -> TemplateValidationResponse:
    """Compute line totals and validation errors without saving."""
    lines = _drafts_from_request(request.lines)
    totals = compute_line_totals(lines)
    errors = validate_template_form(
        TemplateForm(
            template_number=request.template_number,
            name=request.name,
            transaction_type=request.transaction_type,
            filter=request.filter,
            currency=request.currency,
            lines=lines,
        )
    )
    return TemplateValidationResponse(
        debit=totals.debit,
        credit=totals.credit,
        balanced=totals.balanced,
        errors=errors,
        can_submit=not errors,
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: int,
    repo: Annotated[AccountingEntryTemplateRepository, Depends(get_template_repo)],
) -> TemplateResponse:
    """Get a template with its lines."""
    return TemplateResponse.model_validate(_get_or_404(repo, template_id))


@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: int,
    request: TemplateUpdate,
    db: DbSession,
    repo: Annotated[AccountingEntryTemplateRepository, Depends(get_template_repo)],
) -> TemplateResponse:
    """Update a template.

    The merged result (current values overridden by the request) must pass
    the same validation as a new template.
    """
    template = _get_or_404(repo, template_id)

    lines = (
        _drafts_from_request(request.lines)
        if request.lines is not None
        else _drafts_from_model(template.lines)
    )
    _raise_if_invalid(
        TemplateForm(
            template_number=(
                request.template_number
                if request.template_number is not None
                else template.template_number
            ),
            name=request.name if request.name is not None else template.name,
            transaction_type=(
                request.transaction_type
                if request.transaction_type is not None
                else template.transaction_type
            ),
            filter=request.filter or template.filter,
            currency=request.currency or template.currency,
            lines=lines,
        )
    )

    fields = _normalize_text_fields(
        request.model_dump(exclude={"lines"}, exclude_unset=True)
    )
    try:
        template = repo.update(
            template_id,
            lines=lines if request.lines is not None else None,
            **fields,
        )
        db.commit()
    except IntegrityError as e:
        _raise_conflict(db, e)
    db.refresh(template)
    return TemplateResponse.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: int,
    db: DbSession,
    repo: Annotated[AccountingEntryTemplateRepository, Depends(get_template_repo)],
) -> None:
    """Delete a template and its lines."""
    try:
        repo.delete(template_id)
    except AccountingEntryTemplateNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e
    db.commit()


@router.post("/{template_id}/apply", response_model=TemplateApplyResponse)
async def apply_template(
    template_id: int,
    request: TemplateApplyRequest,
    repo: Annotated[AccountingEntryTemplateRepository, Depends(get_template_repo)],
    service: Annotated[TemplateApplicationService, Depends(get_application_service)],
) -> TemplateApplyResponse:
    """Check a template against a record and return the generated lines."""
    template = _get_or_404(repo, template_id)
    result = service.apply(template, request.record)
    return TemplateApplyResponse(
        template_id=result.template_id,
        matched=result.matched,
        lines=[
            GeneratedLineResponse(
                account_code=line.account_code,
                movement_type=line.movement_type,
                amount=line.amount,
                execution_order=line.execution_order,
            )
            for line in result.lines
        ],
    )
