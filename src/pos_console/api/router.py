from fastapi import APIRouter, Depends

from pos_console.api.routes import (
    auth,
    bookings,
    branches,
    carts,
    customers,
    dashboard,
    households,
    products,
    services,
    staff,
    stocks,
    transactions,
)
from pos_console.auth import get_current_user

api_router = APIRouter()
api_router.include_router(auth.router)

protected = [Depends(get_current_user)]
api_router.include_router(dashboard.router, dependencies=protected)
api_router.include_router(branches.router, dependencies=protected)
api_router.include_router(staff.router, dependencies=protected)
api_router.include_router(customers.router, dependencies=protected)
api_router.include_router(products.router, dependencies=protected)
api_router.include_router(stocks.router, dependencies=protected)
api_router.include_router(services.router, dependencies=protected)
api_router.include_router(bookings.router, dependencies=protected)
api_router.include_router(carts.router, dependencies=protected)
api_router.include_router(transactions.router, dependencies=protected)
api_router.include_router(households.router, dependencies=protected)
