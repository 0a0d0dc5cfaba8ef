from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from pos_console import clock, crud, ledger
from pos_console.api.deps import Page, delete_or_409, get_or_404, org_id
from pos_console.dependencies import get_db
from pos_console.logging_config import get_logger
from pos_console.schemas import PageOut, StockInCreate, StockMovementRead

router = APIRouter(prefix="/product-stocks", tags=["stocks"])
logger = get_logger("api.stocks")


def _repo(db: Session) -> crud.StockRepository:
    return crud.StockRepository(db, org_id())


@router.get("", response_model=PageOut[StockMovementRead])
def list_movements(
    q: Optional[str] = None,
    branch_id: Optional[int] = None,
    product_id: Optional[int] = None,
    type: Optional[str] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    rows, total = _repo(db).list_with_products(
        q=q, branch_id=branch_id, product_id=product_id, type=type, offset=page.offset, limit=page.limit
    )
    items = []
    for movement, product_name in rows:
        read = StockMovementRead.model_validate(movement)
        read.product_name = product_name
        items.append(read)
    return PageOut[StockMovementRead].build(items, total, page.page, page.per_page)


@router.post("", response_model=StockMovementRead, status_code=status.HTTP_201_CREATED)
def receive_stock(payload: StockInCreate, db: Session = Depends(get_db)) -> StockMovementRead:
    """Record an ``in`` movement for goods received."""

    product = crud.ProductRepository(db, org_id()).get(payload.product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    data = payload.model_dump()
    data["type"] = ledger.STOCK_IN
    data["transaction_date"] = clock.as_utc(data["transaction_date"]) if data["transaction_date"] else clock.utcnow()
    if data["branch_id"] is None:
        data["branch_id"] = product.branch_id
    movement = _repo(db).add(data)
    logger.info("Received %s x product %s (movement %s)", movement.quantity, product.id, movement.id)

    read = StockMovementRead.model_validate(movement)
    read.product_name = product.name
    return read


@router.delete("/{movement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movement(movement_id: int, db: Session = Depends(get_db)) -> None:
    """Remove a mistaken ledger row."""

    repo = _repo(db)
    movement = get_or_404(repo, movement_id, "Stock movement")
    logger.warning(
        "Deleting %s movement %s of product %s (qty %s)",
        movement.type,
        movement.id,
        movement.product_id,
        movement.quantity,
    )
    delete_or_409(repo, movement)
