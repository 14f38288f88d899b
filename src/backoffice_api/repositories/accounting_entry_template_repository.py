"""AccountingEntryTemplateRepository for managing accounting entry templates."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice_api.models.accounting_entry_template import (
    AccountingEntryTemplate,
    AccountingEntryTemplateLine,
    TemplateCurrency,
    TemplateFilter,
)
from backoffice_api.services.condition_evaluator import to_decimal
from backoffice_api.services.template_lines import TemplateLineDraft

_NULLABLE_FIELDS = ("document", "description")

_UPDATABLE_FIELDS = (
    "template_number",
    "name",
    "filter",
    "currency",
    "transaction_type",
    "document",
    "condition",
    "description",
    "is_active",
)


class AccountingEntryTemplateNotFoundError(Exception):
    """Raised when an accounting entry template is not found."""

    pass


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


class AccountingEntryTemplateRepository:
    """Repository for accounting entry template CRUD operations."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy database session.
        """
        self._session = session

    def _build_lines(
        self, lines: Iterable[TemplateLineDraft]
    ) -> list[AccountingEntryTemplateLine]:
        ordered = sorted(lines, key=lambda line: line.execution_order)
        return [
            AccountingEntryTemplateLine(
                account_code=line.account_code,
                movement_type=_enum_value(line.movement_type),
                application_type=_enum_value(line.application_type),
                calculation_base=_enum_value(line.calculation_base),
                value=to_decimal(line.value),
                execution_order=position,
            )
            for position, line in enumerate(ordered, start=1)
        ]

    def create(
        self,
        company_id: str,
        template_number: str,
        name: str,
        transaction_type: str,
        filter: TemplateFilter | str = TemplateFilter.BOTH,
        currency: TemplateCurrency | str = TemplateCurrency.ALL,
        condition: dict[str, Any] | None = None,
        document: str | None = None,
        description: str | None = None,
        is_active: bool = True,
        lines: Iterable[TemplateLineDraft] = (),
    ) -> AccountingEntryTemplate:
        """Create a new template with its lines.

        Args:
            company_id: Owning company.
            template_number: Company-unique template number.
            name: Human-readable name.
            transaction_type: Transaction type the template books.
            filter: Document scope (INVOICES, PAYROLL or BOTH).
            currency: Currency scope (ALL, PEN or USD).
            condition: Condition tree in wire format (stored as-is).
            document: Optional document type.
            description: Optional description.
            is_active: Whether the template is applied.
            lines: Template lines; execution order is renumbered from 1.

        Returns:
            The created AccountingEntryTemplate.
        """
        template = AccountingEntryTemplate(
            company_id=company_id,
            template_number=template_number,
            name=name,
            transaction_type=transaction_type,
            filter=_enum_value(filter),
            currency=_enum_value(currency),
            condition=condition or {},
            document=document,
            description=description,
            is_active=is_active,
            lines=self._build_lines(lines),
        )
        self._session.add(template)
        self._session.flush()
        return template

    def get(self, template_id: int) -> AccountingEntryTemplate:
        """Get a template by ID.

        Raises:
            AccountingEntryTemplateNotFoundError: If template doesn't exist.
        """
        template = self._session.get(AccountingEntryTemplate, template_id)
        if template is None:
            raise AccountingEntryTemplateNotFoundError(
                f"Accounting entry template {template_id} not found"
            )
        return template

    def list_by_company(
        self, company_id: str, active_only: bool = False
    ) -> list[AccountingEntryTemplate]:
        """Get a company's templates ordered by template number.

        Args:
            company_id: Owning company.
            active_only: Only return active templates.

        Returns:
            List of AccountingEntryTemplates.
        """
        stmt = select(AccountingEntryTemplate).where(
            AccountingEntryTemplate.company_id == company_id
        )
        if active_only:
            stmt = stmt.where(AccountingEntryTemplate.is_active == True)  # noqa: E712
        stmt = stmt.order_by(AccountingEntryTemplate.template_number)
        return list(self._session.execute(stmt).scalars().all())

    def update(
        self,
        template_id: int,
        lines: Iterable[TemplateLineDraft] | None = None,
        **fields: Any,
    ) -> AccountingEntryTemplate:
        """Update a template.

        Required fields passed as None keep their current value; None clears
        document and description. When lines are given they replace all
        existing lines.

        Args:
            template_id: The template ID.
            lines: New lines (None to keep current).
            **fields: Template columns to change.

        Returns:
            The updated AccountingEntryTemplate.

        Raises:
            AccountingEntryTemplateNotFoundError: If template doesn't exist.
            ValueError: If a field is not updatable.
        """
        template = self.get(template_id)

        for name, value in fields.items():
            if name not in _UPDATABLE_FIELDS:
                raise ValueError(f"Field '{name}' cannot be updated")
            if value is not None or name in _NULLABLE_FIELDS:
                setattr(template, name, _enum_value(value))

        if lines is not None:
            template.lines = self._build_lines(lines)

        self._session.flush()
        return template

    def delete(self, template_id: int) -> None:
        """Delete a template and its lines.

        Raises:
            AccountingEntryTemplateNotFoundError: If template doesn't exist.
        """
        template = self.get(template_id)
        self._session.delete(template)
        self._session.flush()
