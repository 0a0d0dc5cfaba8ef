"""Day-scoped sequential transaction numbers of the form ``YYYYMMDD-n``."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from .clock import local_today
from .exceptions import ReferenceGenerationError
from .logging_config import get_logger
from .models import Transaction

logger = get_logger("references")

SEPARATOR = "-"


def reference_prefix(day: date) -> str:
    return day.strftime("%Y%m%d")


def parse_sequence(number: str, prefix: str) -> Optional[int]:
    """Return the sequence of *number* when it belongs to *prefix*, else ``None``."""

    head, sep, suffix = number.rpartition(SEPARATOR)
    if not sep or head != prefix:
        return None
    try:
        return int(suffix)
    except ValueError:
        return None


def next_reference_number(existing: Iterable[str], today: Optional[date] = None) -> str:
    """Return the number following the highest of today's *existing* numbers.

    Suffixes are compared as integers so ``-10`` follows ``-9``. Numbers from
    other days and unparsable suffixes are ignored; with nothing usable the
    sequence starts at 1.
    """

    prefix = reference_prefix(today or local_today())
    highest = 0
    for number in existing:
        if not number:
            continue
        sequence = parse_sequence(number, prefix)
        if sequence is not None and sequence > highest:
            highest = sequence
    return f"{prefix}{SEPARATOR}{highest + 1}"


def reserve_reference_number(session: Session, today: Optional[date] = None) -> str:
    """Read today's numbers from ``transactions`` and derive the next one.

    Read-then-increment, not a reservation: two concurrent callers can derive
    the same number. The unique index on ``transaction_number`` rejects the
    second insert.
    """

    today = today or local_today()
    pattern = f"{reference_prefix(today)}{SEPARATOR}%"
    try:
        numbers = session.exec(
            select(Transaction.transaction_number).where(col(Transaction.transaction_number).like(pattern))
        ).all()
    except SQLAlchemyError as exc:
        logger.error("Could not read transaction numbers for %s: %s", pattern, exc)
        raise ReferenceGenerationError(
            "Could not generate a transaction number", step="reserving_reference"
        ) from exc
    return next_reference_number(numbers, today)
