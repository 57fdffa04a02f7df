"""
Tests for the UserService: directory operations and login.
"""

from datetime import date

import pytest

from fintrack.exceptions import (
    BadRequestError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
)
from fintrack.models.enums import Category, Role, TransactionType
from fintrack.models.user import User
from fintrack.schemas.transaction import TransactionCreate
from fintrack.schemas.user import UserCreate, UserUpdate
from fintrack.security import decode_access_token, verify_password
from fintrack.services.audit_service import AuditService, ENTITY_USER
from fintrack.services.transaction_service import TransactionService
from fintrack.services.user_service import UserService

# Matches the password make_user() gives every user
DEFAULT_PASSWORD = "s3cret-pass"


def user_request(email="alice@fintrack.test", role=Role.COMPTABLE):
    return UserCreate(
        email=email,
        first_name="Alice",
        last_name="Martin",
        password=DEFAULT_PASSWORD,
        role=role,
    )


class TestCreateUser:

    def test_create_user(self, db_session):
        user = UserService(db_session).create_user(user_request())
        db_session.commit()

        assert user.id is not None
        assert user.is_active is True
        assert user.role == Role.COMPTABLE
        assert user.password_hash != DEFAULT_PASSWORD
        assert verify_password(DEFAULT_PASSWORD, user.password_hash)

    def test_duplicate_email_conflict(self, db_session):
        service = UserService(db_session)
        service.create_user(user_request())
        db_session.commit()

        with pytest.raises(ConflictError, match="already exists"):
            service.create_user(user_request())

    def test_email_is_case_sensitive(self, db_session):
        service = UserService(db_session)
        service.create_user(user_request("alice@fintrack.test"))
        service.create_user(user_request("Alice@fintrack.test"))
        db_session.commit()
        assert len(service.list_users()) == 2

    def test_create_is_audited(self, db_session, admin):
        user = UserService(db_session).create_user(user_request(), actor_id=admin.id)
        db_session.commit()

        entries = AuditService(db_session).by_entity(ENTITY_USER, user.id)
        assert [e.action for e in entries] == ["CREATE_USER"]
        assert entries[0].user_id == admin.id


class TestLookup:

    def test_get_and_find(self, db_session, comptable):
        service = UserService(db_session)
        assert service.get_user(comptable.id).email == comptable.email
        assert service.find_by_email(comptable.email).id == comptable.id

    def test_missing_user(self, db_session):
        service = UserService(db_session)
        with pytest.raises(NotFoundError):
            service.get_user(404)
        with pytest.raises(NotFoundError):
            service.find_by_email("nobody@fintrack.test")

    def test_list_filters(self, db_session, admin, manager, comptable):
        service = UserService(db_session)
        service.deactivate_user(comptable.id)
        db_session.commit()

        assert [u.id for u in service.list_by_role(Role.MANAGER)] == [manager.id]
        assert [u.id for u in service.list_by_active_status(False)] == [comptable.id]
        assert {u.id for u in service.list_by_active_status(True)} == {admin.id, manager.id}


class TestUpdateUser:

    def test_partial_update(self, db_session, comptable):
        service = UserService(db_session)
        service.update_user(comptable.id, UserUpdate(first_name="Jeanne"))
        db_session.commit()

        assert comptable.first_name == "Jeanne"
        assert comptable.last_name == "Comptable"
        assert comptable.role == Role.COMPTABLE

    def test_email_collision_conflict(self, db_session, make_user):
        first = make_user(email="one@fintrack.test")
        make_user(email="two@fintrack.test")

        with pytest.raises(ConflictError):
            UserService(db_session).update_user(
                first.id, UserUpdate(email="two@fintrack.test")
            )

    def test_same_email_accepted(self, db_session, make_user):
        user = make_user(email="one@fintrack.test")
        UserService(db_session).update_user(
            user.id, UserUpdate(email="one@fintrack.test", last_name="Durand")
        )
        db_session.commit()
        assert user.email == "one@fintrack.test"
        assert user.last_name == "Durand"

    def test_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            UserService(db_session).update_user(7, UserUpdate(first_name="Nobody"))


class TestDeleteUser:

    def test_delete_unreferenced_user(self, db_session, admin):
        service = UserService(db_session)
        user = service.create_user(user_request())
        db_session.commit()
        user_id = user.id

        service.delete_user(user_id, actor_id=admin.id)
        db_session.commit()

        assert db_session.get(User, user_id) is None
        actions = [e.action for e in AuditService(db_session).by_entity(ENTITY_USER, user_id)]
        assert actions == ["DELETE_USER", "CREATE_USER"]

    def test_referenced_user_cannot_be_deleted(self, db_session, admin, comptable):
        TransactionService(db_session).create_transaction(TransactionCreate(
            amount="10.00",
            transaction_type=TransactionType.EXPENSE,
            category=Category.OTHER,
            transaction_date=date.today(),
        ), comptable.id)
        db_session.commit()

        with pytest.raises(ConflictError, match="deactivate"):
            UserService(db_session).delete_user(comptable.id, actor_id=admin.id)

    def test_cannot_delete_self(self, db_session, admin):
        with pytest.raises(BadRequestError):
            UserService(db_session).delete_user(admin.id, actor_id=admin.id)

    def test_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            UserService(db_session).delete_user(99)


class TestDeactivateAndLogin:

    def test_login_succeeds(self, db_session, comptable):
        result = UserService(db_session).authenticate(comptable.email, DEFAULT_PASSWORD)

        assert result.user.id == comptable.id
        payload = decode_access_token(result.token)
        assert payload.user_id == comptable.id
        assert payload.role == Role.COMPTABLE

    def test_wrong_password(self, db_session, comptable):
        with pytest.raises(InvalidCredentialsError):
            UserService(db_session).authenticate(comptable.email, "not-the-password")

    def test_unknown_email(self, db_session):
        with pytest.raises(InvalidCredentialsError):
            UserService(db_session).authenticate("ghost@fintrack.test", DEFAULT_PASSWORD)

    def test_deactivated_user_cannot_login(self, db_session, comptable):
        service = UserService(db_session)
        service.deactivate_user(comptable.id)
        db_session.commit()

        with pytest.raises(InvalidCredentialsError, match="deactivated"):
            service.authenticate(comptable.email, DEFAULT_PASSWORD)

    def test_deactivate_is_idempotent(self, db_session, comptable):
        service = UserService(db_session)
        service.deactivate_user(comptable.id)
        service.deactivate_user(comptable.id)
        db_session.commit()
        assert comptable.is_active is False

    def test_deactivate_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            UserService(db_session).deactivate_user(123)
