"""Repository layer for data access patterns."""

from backoffice_api.repositories.accounting_entry_template_repository import (
    AccountingEntryTemplateNotFoundError,
    AccountingEntryTemplateRepository,
)
from backoffice_api.repositories.bank_transaction_repository import (
    BankTransactionNotFoundError,
    BankTransactionRepository,
)

__all__ = [
    "AccountingEntryTemplateNotFoundError",
    "AccountingEntryTemplateRepository",
    "BankTransactionNotFoundError",
    "BankTransactionRepository",
]
