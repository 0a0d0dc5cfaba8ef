"""Database models."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel

from .clock import utcnow


class Branch(SQLModel, table=True):
    __tablename__ = "branches"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    name: str = Field(index=True)
    address: Optional[str] = None
    contact_number: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class User(SQLModel, table=True):
    """A staff member; doubles as the login identity of the console."""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    name: str = Field(index=True)
    email: str = Field(index=True, unique=True)
    position: Optional[str] = None
    type: str = Field(default="user", index=True)
    rate: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    branch_id: Optional[int] = Field(default=None, foreign_key="branches.id", index=True)
    is_active: bool = Field(default=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)


class Customer(SQLModel, table=True):
    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    branch_id: Optional[int] = Field(default=None, foreign_key="branches.id", index=True)
    name: str = Field(index=True)
    birthday: Optional[date] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    branch_id: Optional[int] = Field(default=None, foreign_key="branches.id", index=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, index=True)
    selling_price: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    cost: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    type: str = Field(default="for sale")
    unit: Optional[str] = None
    reorder_point: int = Field(default=5)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)


class ProductStock(SQLModel, table=True):
    """One append-only stock ledger row: ``in`` on receipt, ``out`` on sale."""

    __tablename__ = "product_stocks"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    branch_id: Optional[int] = Field(default=None, foreign_key="branches.id", index=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    transaction_id: Optional[int] = Field(default=None, foreign_key="transactions.id", index=True)
    type: str = Field(index=True)
    quantity: int
    remarks: Optional[str] = None
    transaction_date: datetime = Field(default_factory=utcnow, index=True)
    expiration_date: Optional[date] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow)


class ServiceCategory(SQLModel, table=True):
    __tablename__ = "service_categories"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    name: str = Field(index=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="service_categories.id", index=True)


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    branch_id: Optional[int] = Field(default=None, foreign_key="branches.id", index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="service_categories.id", index=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    base_price: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    duration_minutes: Optional[int] = None
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    branch_id: int = Field(foreign_key="branches.id", index=True)
    customer_id: Optional[int] = Field(default=None, foreign_key="customers.id", index=True)
    doctor_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    schedule_date: date = Field(index=True)
    time_start: time
    status: str = Field(default="pending", index=True)
    remarks: str = Field(default="")
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class BookingAttendant(SQLModel, table=True):
    __tablename__ = "booking_attendants"

    id: Optional[int] = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="bookings.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)


class BookingService(SQLModel, table=True):
    __tablename__ = "booking_services"

    id: Optional[int] = Field(default=None, primary_key=True)
    booking_id: int = Field(foreign_key="bookings.id", index=True)
    service_id: int = Field(foreign_key="services.id", index=True)


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(index=True)
    branch_id: Optional[int] = Field(default=None, foreign_key="branches.id", index=True)
    customer_id: Optional[int] = Field(default=None, foreign_key="customers.id", index=True)
    transaction_number: str = Field(index=True, unique=True)
    reference_number: Optional[str] = Field(default=None, index=True)
    payment_type: str
    total_amount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    status: str = Field(default="completed", index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)


class TransactionItem(SQLModel, table=True):
    __tablename__ = "transaction_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    transaction_id: int = Field(foreign_key="transactions.id", index=True)
    item_type: str
    product_id: Optional[int] = Field(default=None, foreign_key="products.id", index=True)
    service_id: Optional[int] = Field(default=None, foreign_key="services.id", index=True)
    quantity: int
    price: Decimal = Field(max_digits=12, decimal_places=2)
    total: Decimal = Field(max_digits=12, decimal_places=2)
    unit: Optional[str] = None


class Household(SQLModel, table=True):
    __tablename__ = "households"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: Optional[int] = Field(default=None, index=True)
    name: str
    purok: Optional[str] = None
    sitio: Optional[str] = None
    barangay: Optional[str] = Field(default=None, index=True)
    address: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Family(SQLModel, table=True):
    __tablename__ = "families"

    id: Optional[int] = Field(default=None, primary_key=True)
    household_id: int = Field(foreign_key="households.id", index=True)
    husband_name: Optional[str] = None
    wife_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class FamilyMember(SQLModel, table=True):
    __tablename__ = "family_members"

    id: Optional[int] = Field(default=None, primary_key=True)
    family_id: int = Field(foreign_key="families.id", index=True)
    fullname: str
    relation: Optional[str] = None
    is_registered: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow)
