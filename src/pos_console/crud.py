"""Database access helpers.

Every list screen follows the same pattern: equality filters, an ``ILIKE``
search over a few text columns, newest rows first, range pagination and an
exact total count. :class:`Repository` captures that once per table.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Generic, Iterable, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, col, select

from . import ledger, models, security
from .logging_config import get_logger

logger = get_logger("crud")

ModelT = TypeVar("ModelT", bound=SQLModel)


class DuplicateEmailError(RuntimeError):
    """Raised when trying to create a user with an existing email."""


class RecordInUseError(RuntimeError):
    """Raised when deleting a row that other rows still reference."""


class Repository(Generic[ModelT]):
    model: Type[ModelT]
    search_fields: Sequence[str] = ("name",)

    def __init__(self, db: Session, org_id: Optional[int] = None) -> None:
        self.db = db
        self.org_id = org_id

    def _query(self, q: Optional[str] = None, **filters: Any):
        query = select(self.model)
        if self.org_id is not None and hasattr(self.model, "org_id"):
            query = query.where(self.model.org_id == self.org_id)
        for name, value in filters.items():
            if value is not None:
                query = query.where(getattr(self.model, name) == value)
        if q:
            pattern = f"%{q.strip()}%"
            query = query.where(or_(*(col(getattr(self.model, name)).ilike(pattern) for name in self.search_fields)))
        return query

    def list(
        self,
        *,
        q: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> tuple[list[ModelT], int]:
        query = self._query(q, **filters)
        total = self.db.exec(select(func.count()).select_from(query.subquery())).one()
        query = query.order_by(col(self.model.id).desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.exec(query).all()), total

    def all(self, **filters: Any) -> list[ModelT]:
        rows, _ = self.list(**filters)
        return rows

    def get(self, item_id: int) -> Optional[ModelT]:
        item = self.db.get(self.model, item_id)
        if item is None:
            return None
        if self.org_id is not None and getattr(item, "org_id", self.org_id) != self.org_id:
            return None
        return item

    def add(self, data: dict[str, Any]) -> ModelT:
        if self.org_id is not None and "org_id" in self.model.model_fields:
            data = {**data, "org_id": self.org_id}
        item = self.model(**data)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def update(self, item: ModelT, data: dict[str, Any]) -> ModelT:
        for key, value in data.items():
            setattr(item, key, value)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item: ModelT) -> None:
        self.db.delete(item)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Refused to delete %s #%s: still referenced", self.model.__tablename__, item.id)
            raise RecordInUseError("Selected record cannot be deleted.") from exc


class BranchRepository(Repository[models.Branch]):
    model = models.Branch


class CustomerRepository(Repository[models.Customer]):
    model = models.Customer
    search_fields = ("name", "contact_number", "email")


class ProductRepository(Repository[models.Product]):
    model = models.Product
    search_fields = ("name", "category")


class ServiceCategoryRepository(Repository[models.ServiceCategory]):
    model = models.ServiceCategory


class ServiceRepository(Repository[models.Service]):
    model = models.Service


class BookingRepository(Repository[models.Booking]):
    model = models.Booking
    search_fields = ("remarks",)


class TransactionRepository(Repository[models.Transaction]):
    model = models.Transaction
    search_fields = ("transaction_number", "reference_number")


class StockRepository(Repository[models.ProductStock]):
    model = models.ProductStock
    search_fields = ("remarks",)

    def list_with_products(
        self,
        *,
        q: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> tuple[list[tuple[models.ProductStock, str]], int]:
        """Ledger rows joined with their product name; *q* matches the product name."""

        query = select(models.ProductStock, models.Product.name).join(
            models.Product, models.Product.id == models.ProductStock.product_id
        )
        if self.org_id is not None:
            query = query.where(models.ProductStock.org_id == self.org_id)
        for name, value in filters.items():
            if value is not None:
                query = query.where(getattr(models.ProductStock, name) == value)
        if q:
            query = query.where(col(models.Product.name).ilike(f"%{q.strip()}%"))
        total = self.db.exec(select(func.count()).select_from(query.subquery())).one()
        query = query.order_by(col(models.ProductStock.id).desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.exec(query).all()), total


class UserRepository(Repository[models.User]):
    model = models.User
    search_fields = ("name", "email")


def load_movements(db: Session, product_ids: Optional[Iterable[int]] = None) -> list[models.ProductStock]:
    query = select(models.ProductStock)
    if product_ids is not None:
        ids = list(product_ids)
        if not ids:
            return []
        query = query.where(col(models.ProductStock.product_id).in_(ids))
    return list(db.exec(query).all())


def stock_levels(
    db: Session, products: Sequence[models.Product], as_of: Optional[date] = None
) -> dict[int, ledger.StockSummary]:
    """Fold the ledger of every product in *products*."""

    grouped = ledger.group_by_product(load_movements(db, [p.id for p in products]))
    return {product.id: ledger.summarize(grouped.get(product.id, []), as_of) for product in products}


def sellable_products(
    db: Session, org_id: int, branch_id: Optional[int] = None, as_of: Optional[date] = None
) -> list[models.Product]:
    """Active products with positive on-hand stock: what a cart may hold."""

    query = select(models.Product).where(models.Product.org_id == org_id, models.Product.is_active == True)  # noqa: E712
    if branch_id is not None:
        query = query.where(models.Product.branch_id == branch_id)
    products = list(db.exec(query).all())
    levels = stock_levels(db, products, as_of)
    return [product for product in products if levels[product.id].on_hand > 0]


def active_services(db: Session, org_id: int) -> list[models.Service]:
    query = select(models.Service).where(models.Service.org_id == org_id, models.Service.is_active == True)  # noqa: E712
    return list(db.exec(query).all())


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    statement = select(models.User).where(func.lower(models.User.email) == email.lower())
    return db.exec(statement).first()


def create_user(db: Session, org_id: int, data: dict[str, Any], password: str) -> models.User:
    """Provision a staff login; the email must not be taken yet."""

    if get_user_by_email(db, data["email"]):
        raise DuplicateEmailError(f"Email '{data['email']}' already exists")
    user = models.User(**data, org_id=org_id, hashed_password=security.hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError(f"Email '{data['email']}' already exists") from exc
    db.refresh(user)
    logger.info("Provisioned user %s (id=%s)", user.email, user.id)
    return user


def update_user(db: Session, user: models.User, data: dict[str, Any]) -> models.User:
    password = data.pop("password", None)
    email = data.get("email")
    if email and email.lower() != user.email.lower() and get_user_by_email(db, email):
        raise DuplicateEmailError(f"Email '{email}' already exists")
    for key, value in data.items():
        setattr(user, key, value)
    if password:
        user.hashed_password = security.hash_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    """Return the matching user when the credentials are valid."""

    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not security.verify_password(password, user.hashed_password):
        return None
    return user
