"""
Transaction model.

A single income or expense record that moves through an approval
workflow. The workflow is a small state machine; VALID_TRANSITIONS
is the source of truth for which moves are legal.

A version counter detects lost updates: if two sessions load the
same row and both write, the second flush fails with StaleDataError
instead of silently overwriting the first.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fintrack.models.base import Base, utcnow
from fintrack.models.enums import Category, TransactionStatus, TransactionType


VALID_TRANSITIONS: dict[TransactionStatus, set[TransactionStatus]] = {
    TransactionStatus.PENDING: {
        TransactionStatus.VALIDATED,
        TransactionStatus.REJECTED,
    },
    TransactionStatus.VALIDATED: {
        TransactionStatus.FINALIZED,
        TransactionStatus.REJECTED,
    },
    TransactionStatus.FINALIZED: set(),  # Terminal
    TransactionStatus.REJECTED: set(),   # Terminal
}


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            create_constraint=True,
        ),
        nullable=False,
        index=True,
    )
    category: Mapped[Category] = mapped_column(
        SAEnum(Category, name="category_enum", create_constraint=True),
        nullable=False,
        index=True,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(
            TransactionStatus,
            name="transaction_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=TransactionStatus.PENDING,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    transaction_date: Mapped[date] = mapped_column(
        Date, nullable=False, index=True
    )
    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    validated_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    finalized_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Non-owning references: deleting a transaction never touches users
    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_id])
    validated_by: Mapped["User | None"] = relationship(
        foreign_keys=[validated_by_id]
    )
    finalized_by: Mapped["User | None"] = relationship(
        foreign_keys=[finalized_by_id]
    )

    __mapper_args__ = {"version_id_col": version}

    def can_transition_to(self, new_status: TransactionStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def is_finalized(self) -> bool:
        return self.status == TransactionStatus.FINALIZED

    def __repr__(self) -> str:
        return (
            f"<Transaction #{self.id} {self.transaction_type.value} "
            f"{self.amount} ({self.status.value})>"
        )
