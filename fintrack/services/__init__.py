"""Business logic services."""

from fintrack.services.audit_service import AuditService
from fintrack.services.user_service import UserService
from fintrack.services.transaction_service import TransactionService

__all__ = ["AuditService", "UserService", "TransactionService"]
