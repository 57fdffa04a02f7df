"""
Request-scoped dependencies shared by the routers.

get_current_user resolves the bearer token to an active User.
require() layers a permission-table check on top of it.
"""

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from fintrack.exceptions import AuthenticationRequiredError
from fintrack.models.base import get_db
from fintrack.models.user import User
from fintrack.policy import Action, ensure_allowed
from fintrack.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_client_ip(request: Request) -> str | None:
    """Source address stored on audit entries."""
    return request.client.host if request.client else None


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequiredError("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    user = db.get(User, payload.user_id)
    if user is None or not user.is_active:
        raise AuthenticationRequiredError("Account not found or deactivated")
    return user


def require(action: Action) -> Callable:
    """Dependency that lets the request through only if the role permits it."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        ensure_allowed(user, action)
        return user

    return dependency
