"""Stock level arithmetic over the append-only ``product_stocks`` ledger.

On-hand quantities are never stored; they are folded from the full movement
history on every read. Lots whose expiration date lies before the reference
day do not count towards what can be sold.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Union

from .clock import local_today

STOCK_IN = "in"
STOCK_OUT = "out"

OUT_OF_STOCK = "out_of_stock"
LOW_STOCK = "low_stock"
IN_STOCK = "in_stock"


class Movement(Protocol):
    type: str
    quantity: int
    expiration_date: Optional[Union[date, datetime]]


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_expired(movement: Movement, as_of: date) -> bool:
    """Return whether *movement* is a lot that expired before *as_of*."""

    if movement.expiration_date is None:
        return False
    return _as_date(movement.expiration_date) < _as_date(as_of)


def compute_on_hand(movements: Iterable[Movement], as_of: Optional[date] = None) -> int:
    """Sum ``in`` minus ``out`` quantities over the non-expired movements.

    The result is signed: out-of-band corrections can drive it below zero and
    it is reported as-is.
    """

    as_of = as_of or local_today()
    on_hand = 0
    for movement in movements:
        if is_expired(movement, as_of):
            continue
        if movement.type == STOCK_IN:
            on_hand += movement.quantity
        elif movement.type == STOCK_OUT:
            on_hand -= movement.quantity
    return on_hand


def count_expired_lots(movements: Iterable[Movement], as_of: Optional[date] = None) -> int:
    """Count movement rows past their expiration date (lots, not units)."""

    as_of = as_of or local_today()
    return sum(1 for movement in movements if is_expired(movement, as_of))


def stock_status(on_hand: int, reorder_point: int) -> str:
    if on_hand <= 0:
        return OUT_OF_STOCK
    if on_hand <= reorder_point:
        return LOW_STOCK
    return IN_STOCK


@dataclass(frozen=True)
class StockSummary:
    on_hand: int
    expired_lots: int
    total_in: int
    total_out: int


def summarize(movements: Iterable[Movement], as_of: Optional[date] = None) -> StockSummary:
    as_of = as_of or local_today()
    rows = list(movements)
    return StockSummary(
        on_hand=compute_on_hand(rows, as_of),
        expired_lots=count_expired_lots(rows, as_of),
        total_in=sum(m.quantity for m in rows if m.type == STOCK_IN),
        total_out=sum(m.quantity for m in rows if m.type == STOCK_OUT),
    )


def group_by_product(movements: Iterable) -> dict[int, list]:
    """Bucket ledger rows by ``product_id``."""

    grouped: dict[int, list] = defaultdict(list)
    for movement in movements:
        grouped[movement.product_id].append(movement)
    return grouped
