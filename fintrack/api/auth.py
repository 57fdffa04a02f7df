"""
Authentication endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fintrack.api.deps import get_current_user
from fintrack.models.base import get_db
from fintrack.models.user import User
from fintrack.schemas.common import ApiResponse, ERROR_RESPONSES
from fintrack.schemas.user import LoginRequest, LoginResponse, UserResponse
from fintrack.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["Auth"], responses=ERROR_RESPONSES)


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
):
    """Exchange email and password for a bearer token."""
    result = UserService(db).authenticate(request.email, request.password)
    return ApiResponse(
        message="Login successful",
        data=LoginResponse(
            token=result.token,
            expires_in=result.expires_in,
            user=UserResponse.from_model(result.user),
        ),
    )


@router.get("/me", response_model=ApiResponse[UserResponse])
def me(user: User = Depends(get_current_user)):
    """Return the authenticated user's own profile."""
    return ApiResponse(data=UserResponse.from_model(user))
