"""
Pydantic schemas for ledger transactions.

Amounts are validated by TransactionService rather than here, so
that a non-positive amount is reported the same way whether it
arrives over HTTP or from another caller.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator

from fintrack.models.enums import Category, TransactionStatus, TransactionType
from fintrack.models.transaction import Transaction
from fintrack.schemas.user import UserResponse


def _not_in_future(value: date | None) -> date | None:
    if value is not None and value > date.today():
        raise ValueError("transaction date cannot be in the future")
    return value


class TransactionCreate(BaseModel):
    amount: Decimal = Field(max_digits=15, decimal_places=2)
    transaction_type: TransactionType
    category: Category
    description: str | None = Field(default=None, max_length=500)
    transaction_date: date

    @field_validator("transaction_date")
    @classmethod
    def date_not_in_future(cls, v: date) -> date:
        return _not_in_future(v)


class TransactionUpdate(BaseModel):
    """
    Partial update of a transaction's business fields.

    Fields absent from the request are left untouched. An explicit
    null is ignored for required fields; for the optional
    description it clears the value.
    """
    amount: Decimal | None = Field(default=None, max_digits=15, decimal_places=2)
    transaction_type: TransactionType | None = None
    category: Category | None = None
    description: str | None = Field(default=None, max_length=500)
    transaction_date: date | None = None

    # Fields where an explicit null means "clear"
    CLEARABLE: ClassVar[frozenset[str]] = frozenset({"description"})

    @field_validator("transaction_date")
    @classmethod
    def date_not_in_future(cls, v: date | None) -> date | None:
        return _not_in_future(v)

    def changes(self) -> dict[str, Any]:
        changed = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name not in self.CLEARABLE:
                continue
            changed[name] = value
        return changed


class TransactionResponse(BaseModel):
    id: int
    amount: Decimal
    transaction_type: TransactionType
    category: Category
    status: TransactionStatus
    description: str | None
    transaction_date: date
    created_by: UserResponse
    validated_by: UserResponse | None
    finalized_by: UserResponse | None
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            id=txn.id,
            amount=txn.amount,
            transaction_type=txn.transaction_type,
            category=txn.category,
            status=txn.status,
            description=txn.description,
            transaction_date=txn.transaction_date,
            created_by=UserResponse.from_model(txn.created_by),
            validated_by=(
                UserResponse.from_model(txn.validated_by)
                if txn.validated_by else None
            ),
            finalized_by=(
                UserResponse.from_model(txn.finalized_by)
                if txn.finalized_by else None
            ),
            version=txn.version,
            created_at=txn.created_at,
            updated_at=txn.updated_at,
        )


class TransactionSummary(BaseModel):
    """Totals over approved (VALIDATED or FINALIZED) transactions."""
    start_date: date
    end_date: date
    total_income: Decimal
    total_expense: Decimal
    net_balance: Decimal
    count_by_status: dict[TransactionStatus, int]
