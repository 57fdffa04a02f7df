"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from fintrack.models.base import Base
from fintrack.models.enums import (
    Role,
    TransactionType,
    Category,
    TransactionStatus,
)
from fintrack.models.user import User
from fintrack.models.transaction import Transaction
from fintrack.models.audit_log import AuditLog

__all__ = [
    "Base",
    "Role",
    "TransactionType",
    "Category",
    "TransactionStatus",
    "User",
    "Transaction",
    "AuditLog",
]
