from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, col, select

from pos_console import clock, crud, ledger, models
from pos_console.api.deps import org_id
from pos_console.dependencies import get_db
from pos_console.schemas import DashboardSummary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSummary)
def summary(
    branch_id: Optional[int] = None,
    day: Optional[date] = None,
    db: Session = Depends(get_db),
) -> DashboardSummary:
    """Today's figures for a branch (or the whole organization)."""

    day = day or clock.local_today()
    start, end = clock.day_bounds(day)

    sales = select(func.count(), func.coalesce(func.sum(models.Transaction.total_amount), 0)).where(
        models.Transaction.org_id == org_id(),
        col(models.Transaction.created_at) >= start,
        col(models.Transaction.created_at) < end,
    )
    bookings = select(func.count()).select_from(models.Booking).where(
        models.Booking.org_id == org_id(),
        models.Booking.schedule_date == day,
    )
    if branch_id is not None:
        sales = sales.where(models.Transaction.branch_id == branch_id)
        bookings = bookings.where(models.Booking.branch_id == branch_id)
    transaction_count, sales_total = db.exec(sales).one()

    products = crud.ProductRepository(db, org_id()).all(branch_id=branch_id, is_active=True)
    levels = crud.stock_levels(db, products, day)
    low_stock = sum(
        1 for p in products if ledger.stock_status(levels[p.id].on_hand, p.reorder_point) != ledger.IN_STOCK
    )

    return DashboardSummary(
        day=day,
        branch_id=branch_id,
        transactions_today=transaction_count,
        sales_today=Decimal(str(sales_total)),
        bookings_today=db.exec(bookings).one(),
        low_stock_products=low_stock,
        expired_lots=sum(levels[p.id].expired_lots for p in products),
    )
