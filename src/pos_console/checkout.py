"""Turn a populated cart into durable transaction records.

The workflow is a linear state machine::

    idle -> validating -> reserving_reference -> persisting_header
         -> persisting_items -> persisting_stock_movements -> committed

with ``failed`` reachable from every step past validation. Validation
failures return the workflow to ``idle`` without writing anything. The
three writes share one database transaction: a failing step rolls back every
row written before it and the cart stays as it was, ready for another attempt.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from . import references
from .cart import Cart
from .clock import utcnow
from .exceptions import (
    CheckoutError,
    CheckoutValidationError,
    EmptyCartError,
    HeaderWriteError,
    ItemWriteError,
    MissingCustomerError,
    MissingPaymentTypeError,
    StockWriteError,
    UnknownCustomerError,
    WriteError,
)
from .ledger import STOCK_OUT
from .logging_config import get_logger
from .models import Customer, ProductStock, Transaction, TransactionItem

logger = get_logger("checkout")


class CommitState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESERVING_REFERENCE = "reserving_reference"
    PERSISTING_HEADER = "persisting_header"
    PERSISTING_ITEMS = "persisting_items"
    PERSISTING_STOCK_MOVEMENTS = "persisting_stock_movements"
    COMMITTED = "committed"
    FAILED = "failed"


# Steps after which rows already exist in the open database transaction.
_WRITE_STEPS = {
    CommitState.PERSISTING_ITEMS,
    CommitState.PERSISTING_STOCK_MOVEMENTS,
}


@dataclass(frozen=True)
class CommitResult:
    transaction_id: int
    transaction_number: str
    total_amount: Decimal
    item_count: int
    stock_movement_count: int


class TransactionCommitWorkflow:
    """One checkout attempt for a branch; reusable after a failure."""

    def __init__(
        self,
        session: Session,
        *,
        org_id: int,
        branch_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> None:
        self.session = session
        self.org_id = org_id
        self.branch_id = branch_id
        self.today = today
        self.state = CommitState.IDLE
        self.error: Optional[CheckoutError] = None
        self.history: list[CommitState] = [CommitState.IDLE]

    def _transition(self, state: CommitState) -> None:
        self.state = state
        self.history.append(state)

    def commit(self, cart: Cart, customer_id: Optional[int], payment_type: Optional[str]) -> CommitResult:
        self.error = None
        self._transition(CommitState.VALIDATING)
        try:
            self._validate(cart, customer_id, payment_type)
        except CheckoutValidationError as exc:
            logger.warning("Checkout rejected: %s", exc.message)
            self.error = exc
            self._transition(CommitState.IDLE)
            raise

        total = cart.total()
        try:
            self._transition(CommitState.RESERVING_REFERENCE)
            number = references.reserve_reference_number(self.session, self.today)

            self._transition(CommitState.PERSISTING_HEADER)
            header = self._persist_header(number, customer_id, payment_type, total)

            self._transition(CommitState.PERSISTING_ITEMS)
            items = self._persist_items(header, cart)

            self._transition(CommitState.PERSISTING_STOCK_MOVEMENTS)
            movements = self._persist_stock_movements(header, cart)

            self._finish()
        except CheckoutError as exc:
            self._fail(exc)
            raise

        result = CommitResult(
            transaction_id=header.id,
            transaction_number=number,
            total_amount=total,
            item_count=len(items),
            stock_movement_count=len(movements),
        )
        cart.clear()
        self._transition(CommitState.COMMITTED)
        logger.info(
            "Committed transaction %s (id=%s, total=%s, items=%s)",
            result.transaction_number,
            result.transaction_id,
            result.total_amount,
            result.item_count,
        )
        return result

    def _validate(self, cart: Cart, customer_id: Optional[int], payment_type: Optional[str]) -> None:
        if cart.is_empty():
            raise EmptyCartError()
        if not customer_id:
            raise MissingCustomerError()
        if not payment_type or not payment_type.strip():
            raise MissingPaymentTypeError()
        customer = self.session.get(Customer, customer_id)
        if customer is None or customer.org_id != self.org_id:
            raise UnknownCustomerError(customer_id)

    def _persist_header(
        self, number: str, customer_id: int, payment_type: str, total: Decimal
    ) -> Transaction:
        header = Transaction(
            org_id=self.org_id,
            branch_id=self.branch_id,
            customer_id=customer_id,
            transaction_number=number,
            payment_type=payment_type.strip(),
            total_amount=total,
            status="completed",
        )
        try:
            self.session.add(header)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise HeaderWriteError(f"Could not save transaction {number}", step=self.state.value) from exc
        return header

    def _persist_items(self, header: Transaction, cart: Cart) -> list[TransactionItem]:
        items = [
            TransactionItem(
                transaction_id=header.id,
                item_type=line.item_type,
                product_id=line.item_id if line.item_type == "product" else None,
                service_id=line.item_id if line.item_type == "service" else None,
                quantity=line.quantity,
                price=line.unit_price,
                total=line.subtotal,
                unit=line.unit,
            )
            for line in cart.lines
        ]
        try:
            self.session.add_all(items)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise ItemWriteError(
                f"Could not save items of transaction {header.transaction_number}", step=self.state.value
            ) from exc
        return items

    def _persist_stock_movements(self, header: Transaction, cart: Cart) -> list[ProductStock]:
        movements = [
            ProductStock(
                org_id=self.org_id,
                branch_id=self.branch_id,
                product_id=line.item_id,
                transaction_id=header.id,
                type=STOCK_OUT,
                quantity=line.quantity,
                transaction_date=utcnow(),
            )
            for line in cart.product_lines()
        ]
        if not movements:
            return movements
        try:
            self.session.add_all(movements)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StockWriteError(
                f"Could not record stock for transaction {header.transaction_number}", step=self.state.value
            ) from exc
        return movements

    def _finish(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise WriteError("Could not commit transaction", step=self.state.value) from exc

    def _fail(self, exc: CheckoutError) -> None:
        failed_at = self.state
        self.session.rollback()
        self.error = exc
        self._transition(CommitState.FAILED)
        if failed_at in _WRITE_STEPS:
            logger.error(
                "Checkout failed at %s after the header was written; all rows rolled back: %s",
                failed_at.value,
                exc.message,
            )
        else:
            logger.error("Checkout failed at %s: %s", failed_at.value, exc.message)
