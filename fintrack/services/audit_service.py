"""
Audit service: the append-only trail of state changes.

record() adds the entry to the caller's session and flushes it.
It never commits. The entry is committed or rolled back together
with the mutation that triggered it, so a data change without its
audit entry (or the reverse) is never observable.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from fintrack.config import get_settings
from fintrack.exceptions import BadRequestError
from fintrack.logging_config import get_logger
from fintrack.models.audit_log import AuditLog
from fintrack.models.user import User

logger = get_logger("services.audit")

ENTITY_TRANSACTION = "Transaction"
ENTITY_USER = "User"


def _as_naive_utc(value: datetime) -> datetime:
    """created_at is stored as naive UTC; offset-aware bounds are converted to match."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class AuditService:

    def __init__(self, db: Session, ip_address: str | None = None):
        self.db = db
        self.ip_address = ip_address

    def record(
        self,
        user_id: int | None,
        action: str,
        entity_type: str,
        entity_id: int | None,
        details: str | None = None,
    ) -> AuditLog:
        """
        Append one audit entry.

        An actor id that does not resolve to a user is not an error;
        the entry is stored without an actor.
        """
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=self.ip_address,
        )
        if user_id is not None:
            actor = self.db.get(User, user_id)
            if actor is not None:
                entry.user = actor

        self.db.add(entry)
        self.db.flush()

        logger.info(
            "Audit entry recorded",
            extra={
                "audit_action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "actor_id": entry.user_id,
            },
        )
        return entry

    def by_user(self, user_id: int) -> list[AuditLog]:
        return self._newest_first(AuditLog.user_id == user_id)

    def by_entity(self, entity_type: str, entity_id: int) -> list[AuditLog]:
        return self._newest_first(
            AuditLog.entity_type == entity_type,
            AuditLog.entity_id == entity_id,
        )

    def by_action(self, action: str) -> list[AuditLog]:
        return self._newest_first(AuditLog.action == action)

    def by_time_range(self, start: datetime, end: datetime) -> list[AuditLog]:
        """
        Entries created between start and end, both inclusive.

        Naive bounds are taken as UTC.
        """
        start, end = _as_naive_utc(start), _as_naive_utc(end)
        if start > end:
            raise BadRequestError("start must not be after end")
        return self._newest_first(AuditLog.created_at.between(start, end))

    def recent(self, limit: int | None = None) -> list[AuditLog]:
        """The most recent entries, newest first (100 by default)."""
        limit = limit or get_settings().AUDIT_RECENT_LIMIT
        entries = self.db.execute(
            select(AuditLog)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
        ).scalars().all()
        return list(entries)

    def _newest_first(self, *criteria) -> list[AuditLog]:
        entries = self.db.execute(
            select(AuditLog)
            .where(*criteria)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        ).scalars().all()
        return list(entries)
