from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pos_console import crud, ledger, models
from pos_console.api.deps import Page, delete_or_409, get_or_404, org_id
from pos_console.auth import require_admin
from pos_console.dependencies import get_db
from pos_console.schemas import PageOut, ProductCreate, ProductRead, ProductUpdate, ProductWithStock, StockLevel

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(require_admin)])


def _repo(db: Session) -> crud.ProductRepository:
    return crud.ProductRepository(db, org_id())


def _with_stock(product: models.Product, summary: ledger.StockSummary) -> ProductWithStock:
    return ProductWithStock(
        **ProductRead.model_validate(product).model_dump(),
        stock_qty=summary.on_hand,
        expired_lots=summary.expired_lots,
        stock_status=ledger.stock_status(summary.on_hand, product.reorder_point),
    )


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)) -> ProductRead:
    return ProductRead.model_validate(_repo(db).add(payload.model_dump()))


@router.get("", response_model=PageOut[ProductWithStock])
def list_products(
    q: Optional[str] = None,
    branch_id: Optional[int] = None,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    as_of: Optional[date] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    """Products with their on-hand quantity folded from the stock ledger."""

    items, total = _repo(db).list(
        q=q, branch_id=branch_id, category=category, is_active=is_active, offset=page.offset, limit=page.limit
    )
    levels = crud.stock_levels(db, items, as_of)
    return PageOut[ProductWithStock].build(
        [_with_stock(item, levels[item.id]) for item in items], total, page.page, page.per_page
    )


@router.get("/{product_id}", response_model=ProductWithStock)
def get_product(product_id: int, as_of: Optional[date] = None, db: Session = Depends(get_db)) -> ProductWithStock:
    product = get_or_404(_repo(db), product_id, "Product")
    return _with_stock(product, crud.stock_levels(db, [product], as_of)[product.id])


@router.get("/{product_id}/stock", response_model=StockLevel)
def get_product_stock(product_id: int, as_of: Optional[date] = None, db: Session = Depends(get_db)) -> StockLevel:
    product = get_or_404(_repo(db), product_id, "Product")
    summary = crud.stock_levels(db, [product], as_of)[product.id]
    return StockLevel(
        product_id=product.id,
        on_hand=summary.on_hand,
        expired_lots=summary.expired_lots,
        total_in=summary.total_in,
        total_out=summary.total_out,
        stock_status=ledger.stock_status(summary.on_hand, product.reorder_point),
    )


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)) -> ProductRead:
    repo = _repo(db)
    product = get_or_404(repo, product_id, "Product")
    return ProductRead.model_validate(repo.update(product, payload.model_dump(exclude_unset=True)))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, db: Session = Depends(get_db)) -> None:
    repo = _repo(db)
    delete_or_409(repo, get_or_404(repo, product_id, "Product"))
