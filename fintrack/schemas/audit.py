"""
Pydantic schemas for audit log queries.
"""

from datetime import datetime

from pydantic import BaseModel

from fintrack.models.audit_log import AuditLog


class AuditLogResponse(BaseModel):
    id: int
    user_id: int | None
    user_email: str | None
    action: str
    entity_type: str
    entity_id: int | None
    details: str | None
    ip_address: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, entry: AuditLog) -> "AuditLogResponse":
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            user_email=entry.user.email if entry.user else None,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            details=entry.details,
            ip_address=entry.ip_address,
            created_at=entry.created_at,
        )
