"""SQLAlchemy models for the back-office application."""

from backoffice_api.models.accounting_entry_template import (
    AccountingEntryTemplate,
    AccountingEntryTemplateLine,
    ApplicationType,
    CalculationBase,
    MovementType,
    TemplateCurrency,
    TemplateFilter,
)
from backoffice_api.models.bank_transaction import BankTransaction

__all__ = [
    "AccountingEntryTemplate",
    "AccountingEntryTemplateLine",
    "ApplicationType",
    "BankTransaction",
    "CalculationBase",
    "MovementType",
    "TemplateCurrency",
    "TemplateFilter",
]
