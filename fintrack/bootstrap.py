"""
First-run setup.

User creation is restricted to administrators, so an empty
database needs one administrator created out of band. When
BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD are set, that
account is created at startup unless the email is already taken.
"""

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from fintrack.config import Settings
from fintrack.logging_config import get_logger
from fintrack.models.base import unit_of_work
from fintrack.models.enums import Role
from fintrack.models.user import User
from fintrack.schemas.user import UserCreate
from fintrack.services.user_service import UserService

logger = get_logger("bootstrap")


def ensure_bootstrap_admin(db: Session, settings: Settings) -> User | None:
    """Create the configured administrator if missing. Returns it if created."""
    email = settings.BOOTSTRAP_ADMIN_EMAIL
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return None

    existing = db.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()
    if existing is not None:
        return None

    try:
        request = UserCreate(
            email=email,
            first_name="System",
            last_name="Administrator",
            password=password,
            role=Role.ADMIN,
        )
    except ValidationError as exc:
        fields = sorted(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        logger.error(
            "Bootstrap administrator not created: invalid BOOTSTRAP_ADMIN_EMAIL "
            "or BOOTSTRAP_ADMIN_PASSWORD",
            extra={"invalid_fields": fields},
        )
        return None

    with unit_of_work(db):
        admin = UserService(db).create_user(request)
    logger.info("Bootstrap administrator created", extra={"user_id": admin.id})
    return admin
