from typing import Optional

from fastapi import HTTPException, Query, Request, status

from pos_console import crud
from pos_console.cart import CartRegistry
from pos_console.config import get_settings


class Page:
    """Range pagination as used by every list screen: ``page`` is 1-based."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        per_page: Optional[int] = Query(None, ge=1),
    ) -> None:
        settings = get_settings()
        if per_page is None:
            per_page = settings.default_page_size
        self.page = page
        self.per_page = min(per_page, settings.max_page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page

def org_id() -> int:
    return get_settings().org_id

def get_or_404(repo: crud.Repository, item_id: int, label: str):
    item = repo.get(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return item

def delete_or_409(repo: crud.Repository, item) -> None:
    try:
        repo.delete(item)
    except crud.RecordInUseError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.carts
