"""initial schema: users, transactions, audit_logs

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLES = ("ADMIN", "MANAGER", "COMPTABLE")
TRANSACTION_TYPES = ("INCOME", "EXPENSE")
CATEGORIES = (
    "SALES", "SERVICES", "SALARY", "RENT", "OFFICE", "SUPPLIES",
    "UTILITIES", "TAXES", "TRAVEL", "MARKETING", "OTHER",
)
STATUSES = ("PENDING", "VALIDATED", "FINALIZED", "REJECTED")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column(
            "role",
            sa.Enum(*ROLES, name="role_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column(
            "transaction_type",
            sa.Enum(
                *TRANSACTION_TYPES,
                name="transaction_type_enum",
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column(
            "category",
            sa.Enum(*CATEGORIES, name="category_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                *STATUSES,
                name="transaction_status_enum",
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column(
            "created_by_id", sa.Integer(),
            sa.ForeignKey("users.id"), nullable=False,
        ),
        sa.Column(
            "validated_by_id", sa.Integer(),
            sa.ForeignKey("users.id"), nullable=True,
        ),
        sa.Column(
            "finalized_by_id", sa.Integer(),
            sa.ForeignKey("users.id"), nullable=True,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_transactions_transaction_type", "transactions", ["transaction_type"]
    )
    op.create_index("ix_transactions_category", "transactions", ["category"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index(
        "ix_transactions_transaction_date", "transactions", ["transaction_date"]
    )
    op.create_index(
        "ix_transactions_created_by_id", "transactions", ["created_by_id"]
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(),
            sa.ForeignKey("users.id"), nullable=True,
        ),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("transactions")
    op.drop_table("users")
    for enum_name in (
        "transaction_status_enum",
        "category_enum",
        "transaction_type_enum",
        "role_enum",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
