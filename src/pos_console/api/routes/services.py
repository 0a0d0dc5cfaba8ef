from collections import defaultdict
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from pos_console import crud, models
from pos_console.api.deps import Page, delete_or_409, get_or_404, org_id
from pos_console.dependencies import get_db
from pos_console.schemas import (
    CategoryNode,
    PageOut,
    ServiceCategoryCreate,
    ServiceCategoryRead,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
)

router = APIRouter(tags=["services"])


def build_category_tree(
    categories: Sequence[models.ServiceCategory], services: Sequence[models.Service]
) -> list[CategoryNode]:
    """Nest categories under their parents with their services attached.

    Categories whose parent is missing are treated as roots.
    """

    nodes = {c.id: CategoryNode(id=c.id, name=c.name, parent_id=c.parent_id) for c in categories}
    by_category: dict[int, list[ServiceRead]] = defaultdict(list)
    for service in services:
        if service.category_id in nodes:
            by_category[service.category_id].append(ServiceRead.model_validate(service))

    roots = []
    for category in sorted(categories, key=lambda c: (c.name.lower(), c.id)):
        node = nodes[category.id]
        node.services = sorted(by_category[category.id], key=lambda s: s.name.lower())
        parent = nodes.get(category.parent_id) if category.parent_id else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


def _services(db: Session) -> crud.ServiceRepository:
    return crud.ServiceRepository(db, org_id())


def _categories(db: Session) -> crud.ServiceCategoryRepository:
    return crud.ServiceCategoryRepository(db, org_id())


@router.get("/service-categories", response_model=list[ServiceCategoryRead])
def list_categories(parent_id: Optional[int] = None, db: Session = Depends(get_db)) -> list[ServiceCategoryRead]:
    rows = _categories(db).all(parent_id=parent_id)
    return [ServiceCategoryRead.model_validate(row) for row in sorted(rows, key=lambda c: c.name.lower())]


@router.get("/service-categories/tree", response_model=list[CategoryNode])
def category_tree(db: Session = Depends(get_db)) -> list[CategoryNode]:
    return build_category_tree(_categories(db).all(), _services(db).all(is_active=True))


@router.post("/service-categories", response_model=ServiceCategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(payload: ServiceCategoryCreate, db: Session = Depends(get_db)) -> ServiceCategoryRead:
    repo = _categories(db)
    if payload.parent_id is not None and repo.get(payload.parent_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent category not found")
    return ServiceCategoryRead.model_validate(repo.add(payload.model_dump()))


@router.delete("/service-categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db)) -> None:
    repo = _categories(db)
    delete_or_409(repo, get_or_404(repo, category_id, "Service category"))


@router.post("/services", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(payload: ServiceCreate, db: Session = Depends(get_db)) -> ServiceRead:
    return ServiceRead.model_validate(_services(db).add(payload.model_dump()))


@router.get("/services", response_model=PageOut[ServiceRead])
def list_services(
    q: Optional[str] = None,
    category_id: Optional[int] = None,
    branch_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    page: Page = Depends(),
    db: Session = Depends(get_db),
):
    items, total = _services(db).list(
        q=q,
        category_id=category_id,
        branch_id=branch_id,
        is_active=is_active,
        offset=page.offset,
        limit=page.limit,
    )
    return PageOut[ServiceRead].build([ServiceRead.model_validate(i) for i in items], total, page.page, page.per_page)


@router.get("/services/{service_id}", response_model=ServiceRead)
def get_service(service_id: int, db: Session = Depends(get_db)) -> ServiceRead:
    return ServiceRead.model_validate(get_or_404(_services(db), service_id, "Service"))


@router.patch("/services/{service_id}", response_model=ServiceRead)
def update_service(service_id: int, payload: ServiceUpdate, db: Session = Depends(get_db)) -> ServiceRead:
    repo = _services(db)
    service = get_or_404(repo, service_id, "Service")
    return ServiceRead.model_validate(repo.update(service, payload.model_dump(exclude_unset=True)))


@router.delete("/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(service_id: int, db: Session = Depends(get_db)) -> None:
    repo = _services(db)
    delete_or_409(repo, get_or_404(repo, service_id, "Service"))
