"""Validation of accounting entry template forms before submission."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from backoffice_api.models.accounting_entry_template import (
    MovementType,
    TemplateCurrency,
    TemplateFilter,
)
from backoffice_api.services.condition_evaluator import to_decimal
from backoffice_api.services.template_lines import TemplateLineDraft

BALANCE_TOLERANCE = Decimal("0.01")


@dataclass
class LineTotals:
    """Debit and credit sums of a template's lines."""

    debit: Decimal
    credit: Decimal
    balanced: bool


@dataclass
class TemplateForm:
    """Template fields checked before a create or update request."""

    template_number: str | None = ""
    name: str | None = ""
    transaction_type: str | None = ""
    filter: TemplateFilter | str | None = TemplateFilter.BOTH
    currency: TemplateCurrency | str | None = TemplateCurrency.ALL
    lines: list[TemplateLineDraft] = field(default_factory=list)


def compute_line_totals(lines: Iterable[Any]) -> LineTotals:
    """Sum line values per movement type.

    Missing or non-numeric values count as zero. The entry is balanced when
    debit and credit differ by less than 0.01.

    Args:
        lines: Objects with movement_type and value attributes.

    Returns:
        LineTotals with both sums and the balance flag.
    """
    debit = Decimal("0")
    credit = Decimal("0")
    for line in lines:
        value = to_decimal(line.value) or Decimal("0")
        if line.movement_type == MovementType.DEBIT:
            debit += value
        elif line.movement_type == MovementType.CREDIT:
            credit += value
    return LineTotals(
        debit=debit,
        credit=credit,
        balanced=abs(debit - credit) < BALANCE_TOLERANCE,
    )


def _blank(value: str | None) -> bool:
    return not (value or "").strip()


def validate_template_form(form: TemplateForm) -> list[str]:
    """Collect validation errors for a template form.

    Args:
        form: The template being created or updated.

    Returns:
        Human-readable errors, empty when the form can be submitted.
    """
    errors: list[str] = []
    if _blank(form.template_number):
        errors.append("Template number is required")
    if _blank(form.name):
        errors.append("Name is required")
    if _blank(form.transaction_type):
        errors.append("Transaction type is required")
    if not form.filter:
        errors.append("Filter is required")
    if not form.currency:
        errors.append("Currency is required")

    lines = form.lines or []
    if not lines:
        errors.append("Add at least one entry line")
    if any(_blank(line.account_code) for line in lines):
        errors.append("Every line must have an account code")
    if not compute_line_totals(lines).balanced:
        errors.append("Entry must be balanced (debit = credit)")
    return errors


def can_submit(form: TemplateForm) -> bool:
    """Whether the form passes validation."""
    return not validate_template_form(form)
