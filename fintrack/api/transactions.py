"""
Transaction API endpoints.

The API layer is thin: it resolves the caller, opens a unit of
work around each mutation, and wraps results in the response
envelope. Permission, state and value checks all live in
TransactionService.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fintrack.api.deps import get_client_ip, get_current_user, require
from fintrack.models.base import get_db, unit_of_work
from fintrack.models.enums import Category, TransactionStatus, TransactionType
from fintrack.models.transaction import Transaction
from fintrack.models.user import User
from fintrack.policy import Action
from fintrack.schemas.common import ApiResponse, ERROR_RESPONSES
from fintrack.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionSummary,
    TransactionUpdate,
)
from fintrack.services.transaction_service import TransactionService

router = APIRouter(
    prefix="/api/transactions", tags=["Transactions"], responses=ERROR_RESPONSES
)


def _many(txns: list[Transaction]) -> ApiResponse:
    return ApiResponse(data=[TransactionResponse.from_model(t) for t in txns])


def _one(txn: Transaction, message: str | None = None) -> ApiResponse:
    return ApiResponse(message=message, data=TransactionResponse.from_model(txn))


@router.post(
    "", response_model=ApiResponse[TransactionResponse], status_code=201
)
def create_transaction(
    request: TransactionCreate,
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    """Record a new transaction. It starts in PENDING status."""
    service = TransactionService(db, ip_address=ip_address)
    with unit_of_work(db):
        txn = service.create_transaction(request, user.id)
    return _one(txn, "Transaction created")


@router.get("", response_model=ApiResponse[list[TransactionResponse]])
def list_transactions(
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    return _many(TransactionService(db).list_transactions())


@router.get(
    "/my-transactions", response_model=ApiResponse[list[TransactionResponse]]
)
def list_my_transactions(
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    """Transactions created by the caller."""
    return _many(TransactionService(db).list_by_creator(user.id))


@router.get(
    "/status/{status}", response_model=ApiResponse[list[TransactionResponse]]
)
def list_by_status(
    status: TransactionStatus,
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    return _many(TransactionService(db).list_by_status(status))


@router.get(
    "/type/{transaction_type}",
    response_model=ApiResponse[list[TransactionResponse]],
)
def list_by_type(
    transaction_type: TransactionType,
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    return _many(TransactionService(db).list_by_type(transaction_type))


@router.get(
    "/category/{category}",
    response_model=ApiResponse[list[TransactionResponse]],
)
def list_by_category(
    category: Category,
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    return _many(TransactionService(db).list_by_category(category))


@router.get(
    "/date-range", response_model=ApiResponse[list[TransactionResponse]]
)
def list_by_date_range(
    start_date: date,
    end_date: date,
    statuses: list[TransactionStatus] | None = Query(default=None),
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    """Transactions dated within [start_date, end_date], optionally by status."""
    service = TransactionService(db)
    if statuses:
        return _many(service.list_by_date_range_and_statuses(start_date, end_date, statuses))
    return _many(service.list_by_date_range(start_date, end_date))


@router.get(
    "/reports/summary", response_model=ApiResponse[TransactionSummary]
)
def summary_report(
    start_date: date,
    end_date: date,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Approved income, expense and net for a period (MANAGER, ADMIN)."""
    summary = TransactionService(db).summarize(start_date, end_date, user.id)
    return ApiResponse(data=summary)


@router.get(
    "/reports/large", response_model=ApiResponse[list[TransactionResponse]]
)
def large_transactions_report(
    start_date: date,
    end_date: date,
    threshold: Decimal = Query(gt=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Transactions above a threshold amount (MANAGER, ADMIN)."""
    txns = TransactionService(db).list_large(threshold, start_date, end_date, user.id)
    return _many(txns)


@router.get(
    "/{transaction_id}", response_model=ApiResponse[TransactionResponse]
)
def get_transaction(
    transaction_id: int,
    user: User = Depends(require(Action.READ_TRANSACTIONS)),
    db: Session = Depends(get_db),
):
    return _one(TransactionService(db).get_transaction(transaction_id))


@router.put(
    "/{transaction_id}", response_model=ApiResponse[TransactionResponse]
)
def update_transaction(
    transaction_id: int,
    request: TransactionUpdate,
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    """Edit a transaction. Only fields present in the body change."""
    service = TransactionService(db, ip_address=ip_address)
    with unit_of_work(db):
        txn = service.update_transaction(transaction_id, request, user.id)
    return _one(txn, "Transaction updated")


@router.delete("/{transaction_id}", response_model=ApiResponse[None])
def delete_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = TransactionService(db, ip_address=ip_address)
    with unit_of_work(db):
        service.delete_transaction(transaction_id, user.id)
    return ApiResponse(message="Transaction deleted")


@router.patch(
    "/{transaction_id}/validate",
    response_model=ApiResponse[TransactionResponse],
)
def validate_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = TransactionService(db, ip_address=ip_address)
    with unit_of_work(db):
        txn = service.validate_transaction(transaction_id, user.id)
    return _one(txn, "Transaction validated")


@router.patch(
    "/{transaction_id}/finalize",
    response_model=ApiResponse[TransactionResponse],
)
def finalize_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = TransactionService(db, ip_address=ip_address)
    with unit_of_work(db):
        txn = service.finalize_transaction(transaction_id, user.id)
    return _one(txn, "Transaction finalized")


@router.patch(
    "/{transaction_id}/reject",
    response_model=ApiResponse[TransactionResponse],
)
def reject_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    ip_address: str | None = Depends(get_client_ip),
    db: Session = Depends(get_db),
):
    service = TransactionService(db, ip_address=ip_address)
    with unit_of_work(db):
        txn = service.reject_transaction(transaction_id, user.id)
    return _one(txn, "Transaction rejected")
