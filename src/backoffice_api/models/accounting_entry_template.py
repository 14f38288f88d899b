"""Accounting entry template models.

A template describes the ledger lines generated for a document or bank
transaction, and carries an opaque JSON condition tree deciding when it
applies.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice_api.db.base import Base


class TemplateFilter(str, Enum):
    """Kind of document a template is scoped to."""

    INVOICES = "INVOICES"
    PAYROLL = "PAYROLL"
    BOTH = "BOTH"


class TemplateCurrency(str, Enum):
    """Currency a template is scoped to."""

    ALL = "ALL"
    PEN = "PEN"
    USD = "USD"


class MovementType(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class ApplicationType(str, Enum):
    """How a template line computes its amount."""

    FIXED_AMOUNT = "FIXED_AMOUNT"
    PERCENTAGE = "PERCENTAGE"
    TRANSACTION_AMOUNT = "TRANSACTION_AMOUNT"


class CalculationBase(str, Enum):
    """Document amount a PERCENTAGE line is computed from."""

    PENDING_AMOUNT = "PENDING_AMOUNT"
    SUBTOTAL = "SUBTOTAL"
    IGV = "IGV"
    TOTAL = "TOTAL"
    RENT = "RENT"
    TAX = "TAX"
    RETENTION_AMOUNT = "RETENTION_AMOUNT"
    DETRACTION_AMOUNT = "DETRACTION_AMOUNT"
    NET_PAYABLE = "NET_PAYABLE"
    CONCILIATED_AMOUNT = "CONCILIATED_AMOUNT"
    OTHER = "OTHER"


class AccountingEntryTemplate(Base):
    """Stores accounting entry templates."""

    __tablename__ = "accounting_entry_templates"
    __table_args__ = (
        Index("IX_accounting_entry_templates_company", "company_id"),
        Index(
            "UQ_accounting_entry_templates_number",
            "company_id",
            "template_number",
            unique=True,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    company_id: Mapped[str] = mapped_column(String(64), nullable=False)
    template_number: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    filter: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TemplateFilter.BOTH.value
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default=TemplateCurrency.ALL.value
    )
    transaction_type: Mapped[str] = mapped_column(String(100), nullable=False)
    document: Mapped[str | None] = mapped_column(String(100), nullable=True)
    condition: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )  # condition tree wire format, stored as-is
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    lines: Mapped[list["AccountingEntryTemplateLine"]] = relationship(
        "AccountingEntryTemplateLine",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="AccountingEntryTemplateLine.execution_order",
    )

    def __repr__(self) -> str:
        return (
            f"<AccountingEntryTemplate(id={self.id}, "
            f"number='{self.template_number}', name='{self.name}')>"
        )


class AccountingEntryTemplateLine(Base):
    """A single debit or credit line of an accounting entry template."""

    __tablename__ = "accounting_entry_template_lines"
    __table_args__ = (
        Index("IX_template_lines_template_order", "template_id", "execution_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    template_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounting_entry_templates.id", ondelete="CASCADE"),
        nullable=False,
    )
    account_code: Mapped[str] = mapped_column(String(20), nullable=False)
    movement_type: Mapped[str] = mapped_column(String(10), nullable=False)
    application_type: Mapped[str] = mapped_column(String(30), nullable=False)
    calculation_base: Mapped[str | None] = mapped_column(String(30), nullable=True)
    value: Mapped[Decimal | None] = mapped_column(Numeric(19, 4), nullable=True)
    execution_order: Mapped[int] = mapped_column(Integer, nullable=False)

    template: Mapped["AccountingEntryTemplate"] = relationship(
        "AccountingEntryTemplate",
        back_populates="lines",
    )

    def __repr__(self) -> str:
        return (
            f"<AccountingEntryTemplateLine(id={self.id}, order={self.execution_order}, "
            f"{self.movement_type} {self.account_code})>"
        )
