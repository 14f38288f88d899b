"""Create accounting entry template and bank transaction tables.

Revision ID: 001_create_backoffice_tables
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_create_backoffice_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create templates, template lines and bank transactions."""
    op.create_table(
        "accounting_entry_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("template_number", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("filter", sa.String(20), nullable=False, server_default="BOTH"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="ALL"),
        sa.Column("transaction_type", sa.String(100), nullable=False),
        sa.Column("document", sa.String(100), nullable=True),
        sa.Column("condition", sa.JSON(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "IX_accounting_entry_templates_company",
        "accounting_entry_templates",
        ["company_id"],
    )
    op.create_index(
        "UQ_accounting_entry_templates_number",
        "accounting_entry_templates",
        ["company_id", "template_number"],
        unique=True,
    )

    op.create_table(
        "accounting_entry_template_lines",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "template_id",
            sa.Integer(),
            sa.ForeignKey("accounting_entry_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("account_code", sa.String(20), nullable=False),
        sa.Column("movement_type", sa.String(10), nullable=False),
        sa.Column("application_type", sa.String(30), nullable=False),
        sa.Column("calculation_base", sa.String(30), nullable=True),
        sa.Column("value", sa.Numeric(19, 4), nullable=True),
        sa.Column("execution_order", sa.Integer(), nullable=False),
    )
    op.create_index(
        "IX_template_lines_template_order",
        "accounting_entry_template_lines",
        ["template_id", "execution_order"],
    )

    op.create_table(
        "bank_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="PEN"),
        sa.Column("operation_number", sa.String(50), nullable=True),
        sa.Column("transaction_type", sa.String(40), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "IX_bank_transactions_company_date",
        "bank_transactions",
        ["company_id", "transaction_date"],
    )
    op.create_index(
        "IX_bank_transactions_type", "bank_transactions", ["transaction_type"]
    )


def downgrade() -> None:
    """Drop all back-office tables."""
    op.drop_index("IX_bank_transactions_type", table_name="bank_transactions")
    op.drop_index("IX_bank_transactions_company_date", table_name="bank_transactions")
    op.drop_table("bank_transactions")
    op.drop_index(
        "IX_template_lines_template_order",
        table_name="accounting_entry_template_lines",
    )
    op.drop_table("accounting_entry_template_lines")
    op.drop_index(
        "UQ_accounting_entry_templates_number",
        table_name="accounting_entry_templates",
    )
    op.drop_index(
        "IX_accounting_entry_templates_company",
        table_name="accounting_entry_templates",
    )
    op.drop_table("accounting_entry_templates")
