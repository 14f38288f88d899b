"""TemplateApplicationService for applying accounting entry templates to records."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from backoffice_api.models.accounting_entry_template import (
    AccountingEntryTemplate,
    ApplicationType,
    TemplateCurrency,
    TemplateFilter,
)
from backoffice_api.services.condition_evaluator import ConditionEvaluator, to_decimal

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass
class GeneratedLine:
    """A ledger line produced by applying a template line to a record."""

    account_code: str
    movement_type: str
    amount: Decimal
    execution_order: int


@dataclass
class TemplateApplication:
    """Result of applying one template to one record."""

    template_id: int | None
    matched: bool
    lines: list[GeneratedLine] = field(default_factory=list)


class TemplateApplicationService:
    """Decides whether templates apply to a record and builds their lines.

    A record is a flat mapping. Keys used here:
        amount: transaction or document amount (signed).
        currency: "PEN", "USD", ...
        document_kind: "INVOICES" or "PAYROLL".
        subtotal, igv, total, ...: calculation bases, lowercase names.
    Any other key can be referenced by template conditions.
    """

    def __init__(self, evaluator: ConditionEvaluator | None = None) -> None:
        """Initialize the service.

        Args:
            evaluator: Condition evaluator (a default one is created if None).
        """
        self._evaluator = evaluator or ConditionEvaluator()

    def applies(self, template: AccountingEntryTemplate, record: Mapping[str, Any]) -> bool:
        """Check active flag, document scope, currency scope and condition tree.

        Args:
            template: The template to test.
            record: The document or transaction record.

        Returns:
            True if the template applies to the record.
        """
        if not template.is_active:
            return False

        template_filter = template.filter or TemplateFilter.BOTH.value
        if template_filter != TemplateFilter.BOTH.value and template_filter != record.get(
            "document_kind"
        ):
            return False

        template_currency = template.currency or TemplateCurrency.ALL.value
        if template_currency != TemplateCurrency.ALL.value and template_currency != record.get(
            "currency"
        ):
            return False

        return self._evaluator.matches(template.condition, record)

    def generate_lines(
        self, template: AccountingEntryTemplate, record: Mapping[str, Any]
    ) -> list[GeneratedLine]:
        """Compute the ledger lines of a template for a record.

        FIXED_AMOUNT lines use their value; PERCENTAGE lines take value percent
        of the record's calculation base; TRANSACTION_AMOUNT lines use the
        absolute record amount. Amounts are rounded to cents.

        Args:
            template: The template whose lines are generated.
            record: The document or transaction record.

        Returns:
            Generated lines in execution order.
        """
        generated: list[GeneratedLine] = []
        for line in sorted(template.lines, key=lambda item: item.execution_order):
            amount = self._line_amount(
                line.application_type, line.calculation_base, line.value, record
            )
            generated.append(
                GeneratedLine(
                    account_code=line.account_code,
                    movement_type=line.movement_type,
                    amount=amount.quantize(CENT, rounding=ROUND_HALF_UP),
                    execution_order=line.execution_order,
                )
            )
        return generated

    def _line_amount(
        self,
        application_type: str,
        calculation_base: str | None,
        value: Any,
        record: Mapping[str, Any],
    ) -> Decimal:
        line_value = to_decimal(value) or Decimal("0")

        if application_type == ApplicationType.TRANSACTION_AMOUNT:
            return abs(to_decimal(record.get("amount")) or Decimal("0"))

        if application_type == ApplicationType.PERCENTAGE:
            if not calculation_base:
                logger.warning("PERCENTAGE line without calculation base")
                return Decimal("0")
            base = to_decimal(record.get(calculation_base.lower())) or Decimal("0")
            return base * line_value / Decimal("100")

        return line_value

    def apply(
        self, template: AccountingEntryTemplate, record: Mapping[str, Any]
    ) -> TemplateApplication:
        """Apply a template: match it, and generate lines if it matches."""
        if not self.applies(template, record):
            return TemplateApplication(template_id=template.id, matched=False)
        return TemplateApplication(
            template_id=template.id,
            matched=True,
            lines=self.generate_lines(template, record),
        )

    def find_applicable(
        self, templates: Iterable[AccountingEntryTemplate], record: Mapping[str, Any]
    ) -> list[AccountingEntryTemplate]:
        """Get the templates that apply to a record, in input order."""
        return [t for t in templates if self.applies(t, record)]
