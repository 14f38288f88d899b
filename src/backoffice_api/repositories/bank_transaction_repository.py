"""BankTransactionRepository for imported bank-statement rows."""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice_api.models.bank_transaction import BankTransaction


class BankTransactionNotFoundError(Exception):
    """Raised when a bank transaction is not found."""

    pass


class BankTransactionRepository:
    """Repository for bank transaction operations."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy database session.
        """
        self._session = session

    def create(
        self,
        company_id: str,
        transaction_date: date,
        description: str,
        amount: Decimal,
        currency: str = "PEN",
        operation_number: str | None = None,
    ) -> BankTransaction:
        """Create a new, unclassified bank transaction."""
        transaction = BankTransaction(
            company_id=company_id,
            transaction_date=transaction_date,
            description=description,
            amount=amount,
            currency=currency,
            operation_number=operation_number,
        )
        self._session.add(transaction)
        self._session.flush()
        return transaction

    def get(self, transaction_id: int) -> BankTransaction:
        """Get a bank transaction by ID.

        Raises:
            BankTransactionNotFoundError: If transaction doesn't exist.
        """
        transaction = self._session.get(BankTransaction, transaction_id)
        if transaction is None:
            raise BankTransactionNotFoundError(
                f"Bank transaction {transaction_id} not found"
            )
        return transaction

    def list_unclassified(
        self, company_id: str | None = None, limit: int | None = None
    ) -> list[BankTransaction]:
        """Get transactions without a transaction type, oldest first.

        Args:
            company_id: Restrict to one company (None for all).
            limit: Maximum number of rows.

        Returns:
            List of unclassified BankTransactions.
        """
        stmt = select(BankTransaction).where(BankTransaction.transaction_type.is_(None))
        if company_id is not None:
            stmt = stmt.where(BankTransaction.company_id == company_id)
        stmt = stmt.order_by(BankTransaction.transaction_date, BankTransaction.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._session.execute(stmt).scalars().all())

    def set_type(self, transaction_id: int, transaction_type: str) -> BankTransaction:
        """Store the classifier output on a transaction.

        Raises:
            BankTransactionNotFoundError: If transaction doesn't exist.
        """
        transaction = self.get(transaction_id)
        transaction.transaction_type = transaction_type
        self._session.flush()
        return transaction

    def count_by_type(self) -> dict[str | None, int]:
        """Count transactions per transaction type (None = unclassified)."""
        stmt = select(
            BankTransaction.transaction_type, func.count(BankTransaction.id)
        ).group_by(BankTransaction.transaction_type)
        return {row[0]: row[1] for row in self._session.execute(stmt).all()}
