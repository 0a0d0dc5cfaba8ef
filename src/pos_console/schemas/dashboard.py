from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class DashboardSummary(BaseModel):
    day: date
    branch_id: Optional[int] = None
    transactions_today: int
    sales_today: Decimal
    bookings_today: int
    low_stock_products: int
    expired_lots: int
