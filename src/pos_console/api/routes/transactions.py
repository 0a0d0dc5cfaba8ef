from collections import defaultdict
from decimal import Decimal
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, col, select

from pos_console import crud, models
from pos_console.api.deps import Page, get_or_404, org_id
from pos_console.dependencies import get_db
from pos_console.logging_config import get_logger
from pos_console.schemas import (
    ItemQuantityUpdate,
    PageOut,
    TransactionDetail,
    TransactionItemRead,
    TransactionRead,
    TransactionUpdate,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])
logger = get_logger("api.transactions")

RETURNED = "returned"


def build_details(db: Session, transactions: Sequence[models.Transaction]) -> list[TransactionDetail]:
    """Attach customer names and named line items to transaction headers."""

    if not transactions:
        return []
    ids = [t.id for t in transactions]
    items = db.exec(
        select(models.TransactionItem)
        .where(col(models.TransactionItem.transaction_id).in_(ids))
        .order_by(col(models.TransactionItem.id))
    ).all()

    product_ids = {i.product_id for i in items if i.product_id}
    service_ids = {i.service_id for i in items if i.service_id}
    customer_ids = {t.customer_id for t in transactions if t.customer_id}
    product_names = dict(
        db.exec(select(models.Product.id, models.Product.name).where(col(models.Product.id).in_(product_ids))).all()
    ) if product_ids else {}
    service_names = dict(
        db.exec(select(models.Service.id, models.Service.name).where(col(models.Service.id).in_(service_ids))).all()
    ) if service_ids else {}
    customer_names = dict(
        db.exec(select(models.Customer.id, models.Customer.name).where(col(models.Customer.id).in_(customer_ids))).all()
    ) if customer_ids else {}

    grouped: dict[int, list[TransactionItemRead]] = defaultdict(list)
    for item in items:
        read = TransactionItemRead.model_validate(item)
        read.name = product_names.get(item.product_id) if item.product_id else service_names.get(item.service_id)
        grouped[item.transaction_id].append(read)

    details = []
    for transaction in transactions:
        detail = TransactionDetail.model_validate(transaction)
        detail.customer_name = customer_names.get(transaction.customer_id)
        detail.items = grouped[transaction.id]
        details.append(detail)
    return details


def _repo(db: Session) -> crud.TransactionRepository:
    return crud.TransactionRepository(db, org_id())


@router.get("", response_model=PageOut[TransactionRead])
def list_transactions(
    q: Optional[str] = None,
    branch_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    status: Optional[str] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    items, total = _repo(db).list(
        q=q, branch_id=branch_id, customer_id=customer_id, status=status, offset=page.offset, limit=page.limit
    )
    return PageOut[TransactionRead].build(
        [TransactionRead.model_validate(i) for i in items], total, page.page, page.per_page
    )


@router.get("/{transaction_id}", response_model=TransactionDetail)
def get_transaction(transaction_id: int, db: Session = Depends(get_db)) -> TransactionDetail:
    transaction = get_or_404(_repo(db), transaction_id, "Transaction")
    return build_details(db, [transaction])[0]


@router.patch("/{transaction_id}", response_model=TransactionDetail)
def update_transaction(
    transaction_id: int, payload: TransactionUpdate, db: Session = Depends(get_db)
) -> TransactionDetail:
    """Correct the external reference number (e.g. a card slip number)."""

    repo = _repo(db)
    transaction = repo.update(
        get_or_404(repo, transaction_id, "Transaction"), payload.model_dump(exclude_unset=True)
    )
    return build_details(db, [transaction])[0]


@router.patch("/{transaction_id}/items/{item_id}", response_model=TransactionDetail)
def update_item_quantity(
    transaction_id: int, item_id: int, payload: ItemQuantityUpdate, db: Session = Depends(get_db)
) -> TransactionDetail:
    """Record a return by lowering a line's quantity; totals follow the new quantity."""

    transaction = get_or_404(_repo(db), transaction_id, "Transaction")
    item = db.get(models.TransactionItem, item_id)
    if item is None or item.transaction_id != transaction.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction item not found")
    if payload.quantity > item.quantity:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Quantity cannot exceed the quantity sold",
        )

    if payload.quantity < item.quantity:
        logger.info(
            "Transaction %s item %s returned %s of %s",
            transaction.transaction_number,
            item.id,
            item.quantity - payload.quantity,
            item.quantity,
        )
        transaction.status = RETURNED
    item.quantity = payload.quantity
    item.total = item.price * payload.quantity
    db.add(item)
    db.flush()

    lines = db.exec(
        select(models.TransactionItem).where(models.TransactionItem.transaction_id == transaction.id)
    ).all()
    transaction.total_amount = sum((line.total for line in lines), Decimal("0"))
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return build_details(db, [transaction])[0]
