"""
Role-based permission table.

Which role may perform which operation is listed in one place.
Services call ensure_allowed() before touching any state, and the
API layer uses the same table for endpoint guards, so the two can
never disagree.

Ownership rules (a COMPTABLE editing their own transaction) are
not role rules; TransactionService checks those itself.
"""

import enum

from fintrack.exceptions import UnauthorizedError
from fintrack.models.enums import Role
from fintrack.models.user import User


class Action(str, enum.Enum):
    CREATE_TRANSACTION = "CREATE_TRANSACTION"
    READ_TRANSACTIONS = "READ_TRANSACTIONS"
    UPDATE_ANY_TRANSACTION = "UPDATE_ANY_TRANSACTION"
    DELETE_TRANSACTION = "DELETE_TRANSACTION"
    VALIDATE_TRANSACTION = "VALIDATE_TRANSACTION"
    FINALIZE_TRANSACTION = "FINALIZE_TRANSACTION"
    REJECT_TRANSACTION = "REJECT_TRANSACTION"
    VIEW_REPORTS = "VIEW_REPORTS"
    MANAGE_USERS = "MANAGE_USERS"
    READ_USERS = "READ_USERS"
    READ_AUDIT = "READ_AUDIT"


ALL_ROLES = frozenset(Role)

PERMISSIONS: dict[Action, frozenset[Role]] = {
    Action.CREATE_TRANSACTION: ALL_ROLES,
    Action.READ_TRANSACTIONS: ALL_ROLES,
    Action.UPDATE_ANY_TRANSACTION: frozenset({Role.ADMIN}),
    Action.DELETE_TRANSACTION: frozenset({Role.ADMIN}),
    Action.VALIDATE_TRANSACTION: frozenset({Role.MANAGER, Role.ADMIN}),
    Action.FINALIZE_TRANSACTION: frozenset({Role.ADMIN}),
    Action.REJECT_TRANSACTION: frozenset({Role.MANAGER, Role.ADMIN}),
    Action.VIEW_REPORTS: frozenset({Role.MANAGER, Role.ADMIN}),
    Action.MANAGE_USERS: frozenset({Role.ADMIN}),
    Action.READ_USERS: frozenset({Role.MANAGER, Role.ADMIN}),
    Action.READ_AUDIT: frozenset({Role.ADMIN}),
}

_DENIED_MESSAGES = {
    Action.UPDATE_ANY_TRANSACTION: "Only the creator or an ADMIN can modify this transaction",
    Action.DELETE_TRANSACTION: "Only an ADMIN can delete a transaction",
    Action.VALIDATE_TRANSACTION: "Only a MANAGER or ADMIN can validate a transaction",
    Action.FINALIZE_TRANSACTION: "Only an ADMIN can finalize a transaction",
    Action.REJECT_TRANSACTION: "Only a MANAGER or ADMIN can reject a transaction",
}


def is_allowed(role: Role, action: Action) -> bool:
    return role in PERMISSIONS[action]


def ensure_allowed(user: User, action: Action) -> None:
    """Raise UnauthorizedError unless the user's role permits the action."""
    if not is_allowed(user.role, action):
        raise UnauthorizedError(
            _DENIED_MESSAGES.get(
                action,
                f"Role {user.role.value} is not allowed to perform {action.value}",
            )
        )
