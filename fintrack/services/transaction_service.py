"""
Transaction service: the ledger and its approval workflow.

    PENDING --validate--> VALIDATED --finalize--> FINALIZED
       |                      |
       +------reject----------+------> REJECTED

Each mutating operation:
1. Loads the transaction (NotFoundError)
2. Resolves the acting user and checks the permission table
   (UnauthorizedError)
3. Checks the current state and field values (BadRequestError)
4. Applies the change and flushes
5. Records exactly one audit entry in the same session

The caller commits. If any step fails, including the audit write,
the caller rolls back and nothing is persisted.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from fintrack.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from fintrack.logging_config import get_logger
from fintrack.models.enums import Category, TransactionStatus, TransactionType
from fintrack.models.transaction import Transaction
from fintrack.models.user import User
from fintrack.policy import Action, ensure_allowed, is_allowed
from fintrack.schemas.transaction import (
    TransactionCreate,
    TransactionSummary,
    TransactionUpdate,
)
from fintrack.services.audit_service import AuditService, ENTITY_TRANSACTION
from fintrack.services.user_service import UserService

logger = get_logger("services.transactions")

MINIMUM_AMOUNT = Decimal("0.01")

# Statuses whose amounts count towards reported totals
APPROVED_STATUSES = (TransactionStatus.VALIDATED, TransactionStatus.FINALIZED)


def _check_amount(amount: Decimal) -> None:
    if amount is None or amount < MINIMUM_AMOUNT:
        raise BadRequestError(
            f"Amount must be positive (minimum {MINIMUM_AMOUNT})"
        )


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise BadRequestError(
            f"Start date {start} is after end date {end}"
        )


class TransactionService:

    def __init__(self, db: Session, ip_address: str | None = None):
        self.db = db
        self.user_service = UserService(db, ip_address=ip_address)
        self.audit_service = AuditService(db, ip_address=ip_address)

    def _get_actor(self, actor_id: int) -> User:
        return self.user_service.get_user(actor_id)

    def _audit(self, actor: User, action: str, txn: Transaction, details: str):
        self.audit_service.record(
            actor.id, action, ENTITY_TRANSACTION, txn.id, details
        )

    # --- Writes ---

    def create_transaction(
        self, request: TransactionCreate, actor_id: int
    ) -> Transaction:
        """Record a new transaction in PENDING status."""
        creator = self._get_actor(actor_id)
        ensure_allowed(creator, Action.CREATE_TRANSACTION)
        _check_amount(request.amount)

        txn = Transaction(
            amount=request.amount,
            transaction_type=request.transaction_type,
            category=request.category,
            description=request.description,
            transaction_date=request.transaction_date,
            status=TransactionStatus.PENDING,
            created_by=creator,
        )
        self.db.add(txn)
        self.db.flush()

        self._audit(
            creator, "CREATE_TRANSACTION", txn,
            f"Created {txn.transaction_type.value} transaction of {txn.amount}",
        )
        logger.info(
            "Transaction created",
            extra={"transaction_id": txn.id, "actor_id": creator.id},
        )
        return txn

    def update_transaction(
        self, transaction_id: int, request: TransactionUpdate, actor_id: int
    ) -> Transaction:
        """
        Edit the business fields of a transaction.

        Only the creator or an ADMIN may edit, and never once the
        transaction is finalized. Fields absent from the request are
        left as they are.
        """
        txn = self.get_transaction(transaction_id)
        actor = self._get_actor(actor_id)

        if txn.created_by_id != actor.id and not is_allowed(
            actor.role, Action.UPDATE_ANY_TRANSACTION
        ):
            raise UnauthorizedError(
                "Only the creator or an ADMIN can modify this transaction"
            )

        if txn.is_finalized:
            raise BadRequestError("Cannot modify a finalized transaction")

        changes = request.changes()
        if "amount" in changes:
            _check_amount(changes["amount"])

        for field, value in changes.items():
            setattr(txn, field, value)
        self.db.flush()

        self._audit(
            actor, "UPDATE_TRANSACTION", txn,
            f"Updated transaction #{txn.id}: {', '.join(sorted(changes)) or 'no fields'}",
        )
        logger.info(
            "Transaction updated",
            extra={"transaction_id": txn.id, "actor_id": actor.id, "fields": sorted(changes)},
        )
        return txn

    def delete_transaction(self, transaction_id: int, actor_id: int) -> None:
        """
        Hard-delete a transaction (ADMIN only).

        The audit entry is written before the row is removed.
        """
        txn = self.get_transaction(transaction_id)
        actor = self._get_actor(actor_id)
        ensure_allowed(actor, Action.DELETE_TRANSACTION)

        self._audit(
            actor, "DELETE_TRANSACTION", txn,
            f"Deleted transaction #{txn.id} ({txn.status.value}, {txn.amount})",
        )
        self.db.delete(txn)
        self.db.flush()
        logger.info(
            "Transaction deleted",
            extra={"transaction_id": transaction_id, "actor_id": actor.id},
        )

    def validate_transaction(self, transaction_id: int, actor_id: int) -> Transaction:
        """PENDING -> VALIDATED (MANAGER or ADMIN)."""
        txn = self.get_transaction(transaction_id)
        validator = self._get_actor(actor_id)
        ensure_allowed(validator, Action.VALIDATE_TRANSACTION)

        if txn.status != TransactionStatus.PENDING:
            raise BadRequestError(
                f"Only a PENDING transaction can be validated "
                f"(status: {txn.status.value})"
            )

        txn.validated_by = validator
        return self._transition(
            txn, validator, TransactionStatus.VALIDATED, "VALIDATE_TRANSACTION"
        )

    def finalize_transaction(self, transaction_id: int, actor_id: int) -> Transaction:
        """VALIDATED -> FINALIZED (ADMIN only)."""
        txn = self.get_transaction(transaction_id)
        finalizer = self._get_actor(actor_id)
        ensure_allowed(finalizer, Action.FINALIZE_TRANSACTION)

        if txn.status != TransactionStatus.VALIDATED:
            raise BadRequestError(
                f"Only a VALIDATED transaction can be finalized "
                f"(status: {txn.status.value})"
            )

        txn.finalized_by = finalizer
        return self._transition(
            txn, finalizer, TransactionStatus.FINALIZED, "FINALIZE_TRANSACTION"
        )

    def reject_transaction(self, transaction_id: int, actor_id: int) -> Transaction:
        """PENDING or VALIDATED -> REJECTED (MANAGER or ADMIN)."""
        txn = self.get_transaction(transaction_id)
        rejector = self._get_actor(actor_id)
        ensure_allowed(rejector, Action.REJECT_TRANSACTION)

        if txn.is_finalized:
            raise BadRequestError("Cannot reject a finalized transaction")
        if not txn.can_transition_to(TransactionStatus.REJECTED):
            raise BadRequestError(
                f"Cannot reject a transaction with status {txn.status.value}"
            )

        return self._transition(
            txn, rejector, TransactionStatus.REJECTED, "REJECT_TRANSACTION"
        )

    def _transition(
        self,
        txn: Transaction,
        actor: User,
        new_status: TransactionStatus,
        action: str,
    ) -> Transaction:
        if not txn.can_transition_to(new_status):
            raise BadRequestError(
                f"Cannot transition from {txn.status.value} to {new_status.value}"
            )

        old_status = txn.status
        txn.status = new_status
        self.db.flush()

        self._audit(
            actor, action, txn,
            f"Transaction #{txn.id}: {old_status.value} -> {new_status.value}",
        )
        logger.info(
            "Transaction status changed",
            extra={
                "transaction_id": txn.id,
                "actor_id": actor.id,
                "from_status": old_status.value,
                "to_status": new_status.value,
            },
        )
        return txn

    # --- Reads ---
    # Any authenticated caller may read any transaction.

    def get_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if not txn:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return txn

    def list_transactions(self) -> list[Transaction]:
        return self._newest_first()

    def list_by_status(self, status: TransactionStatus) -> list[Transaction]:
        return self._newest_first(Transaction.status == status)

    def list_by_type(self, transaction_type: TransactionType) -> list[Transaction]:
        return self._newest_first(Transaction.transaction_type == transaction_type)

    def list_by_category(self, category: Category) -> list[Transaction]:
        return self._newest_first(Transaction.category == category)

    def list_by_date_range(self, start: date, end: date) -> list[Transaction]:
        """Transactions dated between start and end, both inclusive."""
        _check_range(start, end)
        return self._newest_first(Transaction.transaction_date.between(start, end))

    def list_by_date_range_and_statuses(
        self, start: date, end: date, statuses: list[TransactionStatus]
    ) -> list[Transaction]:
        _check_range(start, end)
        return self._newest_first(
            Transaction.transaction_date.between(start, end),
            Transaction.status.in_(statuses),
        )

    def list_by_creator(self, user_id: int) -> list[Transaction]:
        return self._newest_first(Transaction.created_by_id == user_id)

    def _newest_first(self, *criteria) -> list[Transaction]:
        txns = self.db.execute(
            select(Transaction)
            .where(*criteria)
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        ).scalars().all()
        return list(txns)

    # --- Reports ---

    def summarize(self, start: date, end: date, actor_id: int) -> TransactionSummary:
        """
        Income, expense and net over approved transactions in a date range.

        Only VALIDATED and FINALIZED amounts are summed; PENDING and
        REJECTED transactions appear in the per-status counts only.
        """
        ensure_allowed(self._get_actor(actor_id), Action.VIEW_REPORTS)
        _check_range(start, end)

        total_income = self._sum_approved(TransactionType.INCOME, start, end)
        total_expense = self._sum_approved(TransactionType.EXPENSE, start, end)

        rows = self.db.execute(
            select(Transaction.status, func.count(Transaction.id))
            .where(Transaction.transaction_date.between(start, end))
            .group_by(Transaction.status)
        ).all()
        count_by_status = {status: 0 for status in TransactionStatus}
        for status, count in rows:
            count_by_status[status] = count

        return TransactionSummary(
            start_date=start,
            end_date=end,
            total_income=total_income,
            total_expense=total_expense,
            net_balance=total_income - total_expense,
            count_by_status=count_by_status,
        )

    def _sum_approved(
        self, transaction_type: TransactionType, start: date, end: date
    ) -> Decimal:
        total = self.db.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0)).where(
                Transaction.transaction_type == transaction_type,
                Transaction.status.in_(APPROVED_STATUSES),
                Transaction.transaction_date.between(start, end),
            )
        ).scalar()
        return Decimal(str(total)).quantize(MINIMUM_AMOUNT)

    def list_large(
        self, threshold: Decimal, start: date, end: date, actor_id: int
    ) -> list[Transaction]:
        """Transactions above an amount threshold, for manual review."""
        ensure_allowed(self._get_actor(actor_id), Action.VIEW_REPORTS)
        _check_range(start, end)
        return self._newest_first(
            Transaction.amount > threshold,
            Transaction.transaction_date.between(start, end),
        )
