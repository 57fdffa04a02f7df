"""
Audit log endpoints (ADMIN only).

Read-only: there is no endpoint that writes, edits or removes
an audit entry.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fintrack.api.deps import require
from fintrack.models.audit_log import AuditLog
from fintrack.models.base import get_db
from fintrack.models.user import User
from fintrack.policy import Action
from fintrack.schemas.audit import AuditLogResponse
from fintrack.schemas.common import ApiResponse, ERROR_RESPONSES
from fintrack.services.audit_service import AuditService

router = APIRouter(prefix="/api/audit-logs", tags=["Audit"], responses=ERROR_RESPONSES)


def _many(entries: list[AuditLog]) -> ApiResponse:
    return ApiResponse(data=[AuditLogResponse.from_model(e) for e in entries])


@router.get("", response_model=ApiResponse[list[AuditLogResponse]])
def recent_audit_logs(
    limit: int = Query(default=100, ge=1, le=100),
    admin: User = Depends(require(Action.READ_AUDIT)),
    db: Session = Depends(get_db),
):
    """Most recent entries, newest first."""
    return _many(AuditService(db).recent(limit))


@router.get("/user/{user_id}", response_model=ApiResponse[list[AuditLogResponse]])
def audit_logs_by_user(
    user_id: int,
    admin: User = Depends(require(Action.READ_AUDIT)),
    db: Session = Depends(get_db),
):
    return _many(AuditService(db).by_user(user_id))


@router.get(
    "/entity/{entity_type}/{entity_id}",
    response_model=ApiResponse[list[AuditLogResponse]],
)
def audit_logs_by_entity(
    entity_type: str,
    entity_id: int,
    admin: User = Depends(require(Action.READ_AUDIT)),
    db: Session = Depends(get_db),
):
    return _many(AuditService(db).by_entity(entity_type, entity_id))


@router.get("/action/{action}", response_model=ApiResponse[list[AuditLogResponse]])
def audit_logs_by_action(
    action: str,
    admin: User = Depends(require(Action.READ_AUDIT)),
    db: Session = Depends(get_db),
):
    return _many(AuditService(db).by_action(action))


@router.get("/range", response_model=ApiResponse[list[AuditLogResponse]])
def audit_logs_by_time_range(
    start: datetime,
    end: datetime,
    admin: User = Depends(require(Action.READ_AUDIT)),
    db: Session = Depends(get_db),
):
    """Entries created within [start, end] (UTC)."""
    return _many(AuditService(db).by_time_range(start, end))
