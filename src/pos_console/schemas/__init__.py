"""Pydantic schemas for API payloads."""

from .booking import BookingCreate, BookingRead, BookingUpdate
from .branch import BranchCreate, BranchRead, BranchUpdate
from .cart import CartLineAdd, CartLineRead, CartLineUpdate, CartOpen, CartRead, CheckoutRequest, CheckoutResponse
from .common import Message, PageOut
from .customer import CustomerCreate, CustomerRead, CustomerUpdate
from .dashboard import DashboardSummary
from .household import FamilyMemberRead, FamilyRead, HouseholdRead
from .product import ProductCreate, ProductRead, ProductUpdate, ProductWithStock
from .service import CategoryNode, ServiceCategoryCreate, ServiceCategoryRead, ServiceCreate, ServiceRead, ServiceUpdate
from .staff import LoginRequest, StaffCreate, StaffRead, StaffUpdate
from .stock import StockInCreate, StockLevel, StockMovementRead
from .transaction import (
    ItemQuantityUpdate,
    TransactionDetail,
    TransactionItemRead,
    TransactionRead,
    TransactionUpdate,
)

__all__ = [
    "BookingCreate",
    "BookingRead",
    "BookingUpdate",
    "BranchCreate",
    "BranchRead",
    "BranchUpdate",
    "CartLineAdd",
    "CartLineRead",
    "CartLineUpdate",
    "CartOpen",
    "CartRead",
    "CategoryNode",
    "CheckoutRequest",
    "CheckoutResponse",
    "CustomerCreate",
    "CustomerRead",
    "CustomerUpdate",
    "DashboardSummary",
    "FamilyMemberRead",
    "FamilyRead",
    "HouseholdRead",
    "ItemQuantityUpdate",
    "LoginRequest",
    "Message",
    "PageOut",
    "ProductCreate",
    "ProductRead",
    "ProductUpdate",
    "ProductWithStock",
    "ServiceCategoryCreate",
    "ServiceCategoryRead",
    "ServiceCreate",
    "ServiceRead",
    "ServiceUpdate",
    "StaffCreate",
    "StaffRead",
    "StaffUpdate",
    "StockInCreate",
    "StockLevel",
    "StockMovementRead",
    "TransactionDetail",
    "TransactionItemRead",
    "TransactionRead",
    "TransactionUpdate",
]
