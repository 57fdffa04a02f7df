"""
User management endpoints.

Writes are ADMIN only; reads are open to ADMIN and MANAGER.
Any user may deactivate their own account.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fintrack.api.deps import get_client_ip, get_current_user, require
from fintrack.models.base import get_db, unit_of_work
from fintrack.models.enums import Role
from fintrack.models.user import User
from fintrack.policy import Action
from fintrack.schemas.common import ApiResponse, ERROR_RESPONSES
from fintrack.schemas.user import UserCreate, UserResponse, UserUpdate
from fintrack.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["Users"], responses=ERROR_RESPONSES)


def _many(users: list[User]) -> ApiResponse:
    return ApiResponse(data=[UserResponse.from_model(u) for u in users])


@router.post("", response_model=ApiResponse[UserResponse], status_code=201)
def create_user(
    request: UserCreate,
    admin: User = Depends(require(Action.MANAGE_USERS)),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = UserService(db, ip_address=ip_address)
    with unit_of_work(db):
        user = service.create_user(request, actor_id=admin.id)
    return ApiResponse(message="User created", data=UserResponse.from_model(user))


@router.get("", response_model=ApiResponse[list[UserResponse]])
def list_users(
    caller: User = Depends(require(Action.READ_USERS)),
    db: Session = Depends(get_db),
):
    return _many(UserService(db).list_users())


@router.get("/role/{role}", response_model=ApiResponse[list[UserResponse]])
def list_users_by_role(
    role: Role,
    caller: User = Depends(require(Action.READ_USERS)),
    db: Session = Depends(get_db),
):
    return _many(UserService(db).list_by_role(role))


@router.get("/status/{is_active}", response_model=ApiResponse[list[UserResponse]])
def list_users_by_status(
    is_active: bool,
    caller: User = Depends(require(Action.READ_USERS)),
    db: Session = Depends(get_db),
):
    return _many(UserService(db).list_by_active_status(is_active))


@router.patch("/me/deactivate", response_model=ApiResponse[None])
def deactivate_self(
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    """Deactivate the caller's own account. Further logins will fail."""
    service = UserService(db, ip_address=ip_address)
    with unit_of_work(db):
        service.deactivate_user(user.id, actor_id=user.id)
    return ApiResponse(message="Account deactivated")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(
    user_id: int,
    caller: User = Depends(require(Action.READ_USERS)),
    db: Session = Depends(get_db),
):
    return ApiResponse(data=UserResponse.from_model(UserService(db).get_user(user_id)))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    request: UserUpdate,
    admin: User = Depends(require(Action.MANAGE_USERS)),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = UserService(db, ip_address=ip_address)
    with unit_of_work(db):
        user = service.update_user(user_id, request, actor_id=admin.id)
    return ApiResponse(message="User updated", data=UserResponse.from_model(user))


@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: int,
    admin: User = Depends(require(Action.MANAGE_USERS)),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = UserService(db, ip_address=ip_address)
    with unit_of_work(db):
        service.delete_user(user_id, actor_id=admin.id)
    return ApiResponse(message="User deleted")


@router.patch("/{user_id}/deactivate", response_model=ApiResponse[None])
def deactivate_user(
    user_id: int,
    admin: User = Depends(require(Action.MANAGE_USERS)),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = UserService(db, ip_address=ip_address)
    with unit_of_work(db):
        service.deactivate_user(user_id, actor_id=admin.id)
    return ApiResponse(message="User deactivated")
