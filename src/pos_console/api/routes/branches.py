from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pos_console import crud
from pos_console.api.deps import Page, delete_or_409, get_or_404, org_id
from pos_console.dependencies import get_db
from pos_console.schemas import BranchCreate, BranchRead, BranchUpdate, PageOut

router = APIRouter(prefix="/branches", tags=["branches"])


def _repo(db: Session) -> crud.BranchRepository:
    return crud.BranchRepository(db, org_id())


@router.post("", response_model=BranchRead, status_code=status.HTTP_201_CREATED)
def create_branch(payload: BranchCreate, db: Session = Depends(get_db)) -> BranchRead:
    return BranchRead.model_validate(_repo(db).add(payload.model_dump()))


@router.get("", response_model=PageOut[BranchRead])
def list_branches(q: Optional[str] = None, page: Page = Depends(), db: Session = Depends(get_db)):
    items, total = _repo(db).list(q=q, offset=page.offset, limit=page.limit)
    return PageOut[BranchRead].build([BranchRead.model_validate(i) for i in items], total, page.page, page.per_page)


@router.get("/{branch_id}", response_model=BranchRead)
def get_branch(branch_id: int, db: Session = Depends(get_db)) -> BranchRead:
    return BranchRead.model_validate(get_or_404(_repo(db), branch_id, "Branch"))


@router.patch("/{branch_id}", response_model=BranchRead)
def update_branch(branch_id: int, payload: BranchUpdate, db: Session = Depends(get_db)) -> BranchRead:
    repo = _repo(db)
    branch = get_or_404(repo, branch_id, "Branch")
    return BranchRead.model_validate(repo.update(branch, payload.model_dump(exclude_unset=True)))


@router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(branch_id: int, db: Session = Depends(get_db)) -> None:
    repo = _repo(db)
    delete_or_409(repo, get_or_404(repo, branch_id, "Branch"))
