from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pos_console import crud
from pos_console.api.deps import Page, delete_or_409, get_or_404, org_id
from pos_console.api.routes.transactions import build_details
from pos_console.dependencies import get_db
from pos_console.schemas import CustomerCreate, CustomerRead, CustomerUpdate, PageOut, TransactionDetail

router = APIRouter(prefix="/customers", tags=["customers"])


def _repo(db: Session) -> crud.CustomerRepository:
    return crud.CustomerRepository(db, org_id())


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)) -> CustomerRead:
    return CustomerRead.model_validate(_repo(db).add(payload.model_dump()))


@router.get("", response_model=PageOut[CustomerRead])
def list_customers(
    q: Optional[str] = None,
    branch_id: Optional[int] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    items, total = _repo(db).list(q=q, branch_id=branch_id, offset=page.offset, limit=page.limit)
    return PageOut[CustomerRead].build([CustomerRead.model_validate(i) for i in items], total, page.page, page.per_page)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)) -> CustomerRead:
    return CustomerRead.model_validate(get_or_404(_repo(db), customer_id, "Customer"))


@router.get("/{customer_id}/transactions", response_model=list[TransactionDetail])
def customer_transactions(customer_id: int, db: Session = Depends(get_db)) -> list[TransactionDetail]:
    """Purchase history of a customer, newest first."""

    customer = get_or_404(_repo(db), customer_id, "Customer")
    transactions = crud.TransactionRepository(db, org_id()).all(customer_id=customer.id)
    return build_details(db, transactions)


@router.patch("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)) -> CustomerRead:
    repo = _repo(db)
    customer = get_or_404(repo, customer_id, "Customer")
    return CustomerRead.model_validate(repo.update(customer, payload.model_dump(exclude_unset=True)))


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, db: Session = Depends(get_db)) -> None:
    repo = _repo(db)
    delete_or_409(repo, get_or_404(repo, customer_id, "Customer"))
