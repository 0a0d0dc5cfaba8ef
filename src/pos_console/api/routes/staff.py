from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from pos_console import crud
from pos_console.api.deps import Page, delete_or_409, get_or_404, org_id
from pos_console.auth import require_admin
from pos_console.config import get_settings
from pos_console.dependencies import get_db
from pos_console.schemas import PageOut, StaffCreate, StaffRead, StaffUpdate

router = APIRouter(prefix="/staff", tags=["staff"], dependencies=[Depends(require_admin)])


def _repo(db: Session) -> crud.UserRepository:
    return crud.UserRepository(db, org_id())


@router.post("", response_model=StaffRead, status_code=status.HTTP_201_CREATED)
def create_staff(payload: StaffCreate, db: Session = Depends(get_db)) -> StaffRead:
    """New staff get the configured default password unless one is given."""

    data = payload.model_dump(exclude={"password"})
    password = payload.password or get_settings().default_password
    try:
        user = crud.create_user(db, org_id(), data, password)
    except crud.DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return StaffRead.model_validate(user)


@router.get("", response_model=PageOut[StaffRead])
def list_staff(
    q: Optional[str] = None,
    branch_id: Optional[int] = None,
    type: Optional[str] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    items, total = _repo(db).list(q=q, branch_id=branch_id, type=type, offset=page.offset, limit=page.limit)
    return PageOut[StaffRead].build([StaffRead.model_validate(i) for i in items], total, page.page, page.per_page)


@router.get("/{user_id}", response_model=StaffRead)
def get_staff(user_id: int, db: Session = Depends(get_db)) -> StaffRead:
    return StaffRead.model_validate(get_or_404(_repo(db), user_id, "Staff"))


@router.patch("/{user_id}", response_model=StaffRead)
def update_staff(user_id: int, payload: StaffUpdate, db: Session = Depends(get_db)) -> StaffRead:
    user = get_or_404(_repo(db), user_id, "Staff")
    try:
        user = crud.update_user(db, user, payload.model_dump(exclude_unset=True))
    except crud.DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return StaffRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(user_id: int, db: Session = Depends(get_db)) -> None:
    repo = _repo(db)
    delete_or_409(repo, get_or_404(repo, user_id, "Staff"))
