"""
Tests for creating the first administrator at startup.
"""

import logging

from fintrack.bootstrap import ensure_bootstrap_admin
from fintrack.config import Settings
from fintrack.models.enums import Role
from fintrack.services.user_service import UserService


def bootstrap_settings(email="root@fintrack.test", password="bootstrap-pass"):
    settings = Settings()
    settings.BOOTSTRAP_ADMIN_EMAIL = email
    settings.BOOTSTRAP_ADMIN_PASSWORD = password
    return settings


def test_creates_admin_when_configured(db_session):
    admin = ensure_bootstrap_admin(db_session, bootstrap_settings())

    assert admin is not None
    assert admin.role == Role.ADMIN
    result = UserService(db_session).authenticate("root@fintrack.test", "bootstrap-pass")
    assert result.user.id == admin.id


def test_second_run_is_a_no_op(db_session):
    settings = bootstrap_settings()
    ensure_bootstrap_admin(db_session, settings)
    assert ensure_bootstrap_admin(db_session, settings) is None
    assert len(UserService(db_session).list_users()) == 1


def test_skipped_without_credentials(db_session):
    assert ensure_bootstrap_admin(db_session, bootstrap_settings(password=None)) is None
    assert UserService(db_session).list_users() == []


def test_short_password_logged_not_raised(db_session, caplog):
    # fintrack loggers do not propagate to root, so attach caplog directly
    fintrack_logger = logging.getLogger("fintrack")
    fintrack_logger.addHandler(caplog.handler)
    try:
        admin = ensure_bootstrap_admin(db_session, bootstrap_settings(password="short"))
    finally:
        fintrack_logger.removeHandler(caplog.handler)

    assert admin is None
    assert UserService(db_session).list_users() == []
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert "BOOTSTRAP_ADMIN_PASSWORD" in errors[0].getMessage()
    assert errors[0].invalid_fields == ["password"]
