"""
User service: the directory of staff accounts.

Owns identity, role and the active flag, and issues access tokens
on login. Every mutation records an audit entry through
AuditService in the caller's session. The caller controls the
commit.
"""

from dataclasses import dataclass

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from fintrack.exceptions import (
    BadRequestError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
)
from fintrack.logging_config import get_logger
from fintrack.models.audit_log import AuditLog
from fintrack.models.enums import Role
from fintrack.models.transaction import Transaction
from fintrack.models.user import User
from fintrack.schemas.user import UserCreate, UserUpdate
from fintrack.security import create_access_token, hash_password, verify_password
from fintrack.services.audit_service import AuditService, ENTITY_USER

logger = get_logger("services.users")


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str
    expires_in: int


class UserService:

    def __init__(self, db: Session, ip_address: str | None = None):
        self.db = db
        self.audit_service = AuditService(db, ip_address=ip_address)

    def _email_taken(self, email: str) -> bool:
        return self.db.execute(
            select(User.id).where(User.email == email)
        ).first() is not None

    def create_user(
        self, request: UserCreate, actor_id: int | None = None
    ) -> User:
        """
        Create a new, active user.

        Raises ConflictError if the email is already registered.
        """
        if self._email_taken(request.email):
            raise ConflictError(
                f"A user with email '{request.email}' already exists"
            )

        user = User(
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role,
            password_hash=hash_password(request.password),
            is_active=True,
        )
        self.db.add(user)
        self.db.flush()

        self.audit_service.record(
            actor_id, "CREATE_USER", ENTITY_USER, user.id,
            f"Created user {user.email} with role {user.role.value}",
        )
        logger.info(
            "User created",
            extra={"user_id": user.id, "role": user.role.value, "actor_id": actor_id},
        )
        return user

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def find_by_email(self, email: str) -> User:
        user = self.db.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()
        if not user:
            raise NotFoundError(f"User with email '{email}' not found")
        return user

    def list_users(self) -> list[User]:
        return list(self.db.execute(
            select(User).order_by(User.id)
        ).scalars().all())

    def list_by_role(self, role: Role) -> list[User]:
        return list(self.db.execute(
            select(User).where(User.role == role).order_by(User.id)
        ).scalars().all())

    def list_by_active_status(self, is_active: bool) -> list[User]:
        return list(self.db.execute(
            select(User).where(User.is_active == is_active).order_by(User.id)
        ).scalars().all())

    def update_user(
        self, user_id: int, request: UserUpdate, actor_id: int | None = None
    ) -> User:
        """
        Apply the fields present in the request.

        The email uniqueness check only runs when the email actually
        changes, so re-sending a user's own email is accepted.
        """
        user = self.get_user(user_id)
        changes = request.changes()

        new_email = changes.get("email")
        if new_email is not None and new_email != user.email:
            if self._email_taken(new_email):
                raise ConflictError(f"Email '{new_email}' is already in use")

        for field, value in changes.items():
            setattr(user, field, value)
        self.db.flush()

        self.audit_service.record(
            actor_id, "UPDATE_USER", ENTITY_USER, user.id,
            f"Updated fields: {', '.join(sorted(changes)) or 'none'}",
        )
        logger.info(
            "User updated",
            extra={"user_id": user.id, "fields": sorted(changes), "actor_id": actor_id},
        )
        return user

    def delete_user(self, user_id: int, actor_id: int | None = None) -> None:
        """
        Hard-delete a user that nothing refers to.

        Users referenced by a transaction (as creator, validator or
        finalizer) or by an audit entry cannot be deleted, since that
        would orphan the ledger history. Deactivate them instead.
        """
        user = self.get_user(user_id)

        if actor_id is not None and actor_id == user.id:
            raise BadRequestError("You cannot delete your own account")

        transaction_refs = self.db.execute(
            select(func.count(Transaction.id)).where(
                or_(
                    Transaction.created_by_id == user.id,
                    Transaction.validated_by_id == user.id,
                    Transaction.finalized_by_id == user.id,
                )
            )
        ).scalar()
        audit_refs = self.db.execute(
            select(func.count(AuditLog.id)).where(AuditLog.user_id == user.id)
        ).scalar()
        if transaction_refs or audit_refs:
            raise ConflictError(
                f"User {user.id} is still referenced by transactions or "
                f"audit entries; deactivate the account instead"
            )

        self.audit_service.record(
            actor_id, "DELETE_USER", ENTITY_USER, user.id,
            f"Deleted user {user.email}",
        )
        self.db.delete(user)
        self.db.flush()
        logger.info("User deleted", extra={"user_id": user_id, "actor_id": actor_id})

    def deactivate_user(self, user_id: int, actor_id: int | None = None) -> User:
        """Mark a user inactive. Deactivating an inactive user is a no-op."""
        user = self.get_user(user_id)
        user.is_active = False
        self.db.flush()

        self.audit_service.record(
            actor_id, "DEACTIVATE_USER", ENTITY_USER, user.id,
            f"Deactivated user {user.email}",
        )
        logger.info("User deactivated", extra={"user_id": user.id, "actor_id": actor_id})
        return user

    def authenticate(self, email: str, password: str) -> LoginResult:
        """
        Check credentials and issue an access token.

        Unknown email, inactive account and wrong password all raise
        InvalidCredentialsError.
        """
        user = self.db.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

        if user is None:
            logger.warning("Login failed: unknown email")
            raise InvalidCredentialsError("Invalid email or password")
        if not user.is_active:
            logger.warning("Login failed: inactive account", extra={"user_id": user.id})
            raise InvalidCredentialsError("This account is deactivated")
        if not verify_password(password, user.password_hash):
            logger.warning("Login failed: wrong password", extra={"user_id": user.id})
            raise InvalidCredentialsError("Invalid email or password")

        token, expires_in = create_access_token(user.id, user.email, user.role)
        logger.info("User logged in", extra={"user_id": user.id})
        return LoginResult(user=user, token=token, expires_in=expires_in)
