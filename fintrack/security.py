"""
Password hashing and bearer tokens.

Passwords are hashed with Argon2. Access tokens are HS256 JWTs
carrying the user id (sub), email and role.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from fintrack.config import Settings, get_settings
from fintrack.exceptions import AuthenticationRequiredError
from fintrack.models.enums import Role

JWT_ALGORITHM = "HS256"

_password_hasher = PasswordHasher()


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    email: str
    role: Role


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def create_access_token(
    user_id: int, email: str, role: Role, settings: Settings | None = None
) -> tuple[str, int]:
    """Create a signed access token. Returns (token, expires_in_seconds)."""
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    expires_in = settings.JWT_EXPIRATION_MINUTES * 60
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str, settings: Settings | None = None
) -> TokenPayload:
    """Decode and validate an access token."""
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationRequiredError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationRequiredError("Invalid token") from exc

    try:
        return TokenPayload(
            user_id=int(payload["sub"]),
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (KeyError, ValueError) as exc:
        raise AuthenticationRequiredError("Invalid token") from exc
