from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from pos_console import crud
from pos_console.api.deps import get_cart_registry, org_id
from pos_console.cart import PRODUCT, Cart, CartRegistry
from pos_console.checkout import TransactionCommitWorkflow
from pos_console.dependencies import get_db
from pos_console.exceptions import CheckoutError
from pos_console.schemas import (
    CartLineAdd,
    CartLineRead,
    CartLineUpdate,
    CartOpen,
    CartRead,
    CheckoutRequest,
    CheckoutResponse,
)

router = APIRouter(prefix="/carts", tags=["carts"])


def _read(cart_id: str, cart: Cart) -> CartRead:
    return CartRead(
        id=cart_id,
        branch_id=cart.branch_id,
        status=cart.status,
        lines=[
            CartLineRead(
                index=index,
                item_type=line.item_type,
                item_id=line.item_id,
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
                unit=line.unit,
            )
            for index, line in enumerate(cart.lines)
        ],
        total=cart.total(),
    )


@router.post("", response_model=CartRead, status_code=status.HTTP_201_CREATED)
def open_cart(payload: CartOpen, registry: CartRegistry = Depends(get_cart_registry)) -> CartRead:
    cart_id, cart = registry.open(payload.branch_id)
    return _read(cart_id, cart)


@router.get("/{cart_id}", response_model=CartRead)
def get_cart(cart_id: str, registry: CartRegistry = Depends(get_cart_registry)) -> CartRead:
    return _read(cart_id, registry.get(cart_id))


@router.post("/{cart_id}/lines", response_model=CartRead, status_code=status.HTTP_201_CREATED)
def add_line(
    cart_id: str,
    payload: CartLineAdd,
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db),
) -> CartRead:
    """Add a sellable product or an active service, refreshing the catalog first."""

    cart = registry.get(cart_id)
    with cart.lock:
        cart.load_catalog(
            crud.sellable_products(db, org_id(), cart.branch_id),
            crud.active_services(db, org_id()),
        )
        if payload.item_type == PRODUCT:
            added = cart.add_product(payload.item_id, payload.quantity)
        else:
            added = cart.add_service(payload.item_id)
    if not added:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{payload.item_type.capitalize()} {payload.item_id} is unavailable or already in the cart",
        )
    return _read(cart_id, cart)


@router.patch("/{cart_id}/lines/{line_index}", response_model=CartRead)
def update_line(
    cart_id: str,
    line_index: int,
    payload: CartLineUpdate,
    registry: CartRegistry = Depends(get_cart_registry),
) -> CartRead:
    cart = registry.get(cart_id)
    cart.update_quantity(line_index, payload.quantity)
    return _read(cart_id, cart)


@router.delete("/{cart_id}/lines/{line_index}", response_model=CartRead)
def remove_line(cart_id: str, line_index: int, registry: CartRegistry = Depends(get_cart_registry)) -> CartRead:
    cart = registry.get(cart_id)
    cart.remove_line(line_index)
    return _read(cart_id, cart)


@router.delete("/{cart_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_cart(cart_id: str, registry: CartRegistry = Depends(get_cart_registry)) -> None:
    registry.discard(cart_id)


@router.post("/{cart_id}/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout(
    cart_id: str,
    payload: CheckoutRequest,
    registry: CartRegistry = Depends(get_cart_registry),
    db: Session = Depends(get_db),
) -> CheckoutResponse:
    """Commit the cart as one transaction; the cart is emptied only on success."""

    cart = registry.get(cart_id)
    workflow = TransactionCommitWorkflow(db, org_id=org_id(), branch_id=cart.branch_id)
    with cart.checkout_guard():
        try:
            result = workflow.commit(cart, payload.customer_id, payload.payment_type)
        except CheckoutError:
            cart.status = workflow.state.value
            raise
        cart.status = workflow.state.value
    return CheckoutResponse(
        transaction_id=result.transaction_id,
        transaction_number=result.transaction_number,
        total_amount=result.total_amount,
        status=cart.status,
    )
