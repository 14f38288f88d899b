"""BankTransaction model for imported bank-statement rows."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_api.db.base import Base


class BankTransaction(Base):
    """Stores bank-statement rows imported for a company."""

    __tablename__ = "bank_transactions"
    __table_args__ = (
        Index("IX_bank_transactions_company_date", "company_id", "transaction_date"),
        Index("IX_bank_transactions_type", "transaction_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    company_id: Mapped[str] = mapped_column(String(64), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="PEN")
    operation_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transaction_type: Mapped[str | None] = mapped_column(
        String(40), nullable=True
    )  # classifier output, NULL until classified
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<BankTransaction(id={self.id}, date={self.transaction_date}, "
            f"amount={self.amount})>"
        )
