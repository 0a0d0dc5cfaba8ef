import os
from collections.abc import Generator
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

os.environ["POS_DATABASE_URL"] = "sqlite://"
os.environ.setdefault("POS_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from pos_console import crud, database, models
from pos_console.app import create_app
from pos_console.config import get_settings
from pos_console.dependencies import get_db

ADMIN_PASSWORD = "admin-pass-123"
CLERK_PASSWORD = "clerk-pass-123"


@pytest.fixture(name="db_engine")
def db_engine_fixture(monkeypatch) -> Generator[Any, None, None]:
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    monkeypatch.setattr(database, "_engine", engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(db_engine) -> Generator[Session, None, None]:
    with Session(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def get_db_override() -> Generator[Session, None, None]:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise

    app.dependency_overrides[get_db] = get_db_override

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="org_id")
def org_id_fixture() -> int:
    return get_settings().org_id


@pytest.fixture(name="branch")
def branch_fixture(session: Session, org_id: int) -> models.Branch:
    return crud.BranchRepository(session, org_id).add({"name": "Main Branch", "address": "Poblacion"})


@pytest.fixture(name="admin")
def admin_fixture(session: Session, org_id: int, branch: models.Branch) -> models.User:
    return crud.create_user(
        session,
        org_id,
        {"name": "Ada Admin", "email": "admin@example.com", "type": "admin", "branch_id": branch.id},
        ADMIN_PASSWORD,
    )


@pytest.fixture(name="clerk")
def clerk_fixture(session: Session, org_id: int, branch: models.Branch) -> models.User:
    return crud.create_user(
        session,
        org_id,
        {"name": "Carl Clerk", "email": "clerk@example.com", "type": "user", "branch_id": branch.id},
        CLERK_PASSWORD,
    )


def login(client: TestClient, email: str, password: str) -> TestClient:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return client


@pytest.fixture(name="admin_client")
def admin_client_fixture(client: TestClient, admin: models.User) -> TestClient:
    return login(client, admin.email, ADMIN_PASSWORD)


@pytest.fixture(name="clerk_client")
def clerk_client_fixture(client: TestClient, clerk: models.User) -> TestClient:
    return login(client, clerk.email, CLERK_PASSWORD)


@pytest.fixture(name="customer")
def customer_fixture(session: Session, org_id: int, branch: models.Branch) -> models.Customer:
    return crud.CustomerRepository(session, org_id).add(
        {"name": "Juan Dela Cruz", "contact_number": "09171234567", "branch_id": branch.id}
    )


@pytest.fixture(name="product")
def product_fixture(session: Session, org_id: int, branch: models.Branch) -> models.Product:
    """A product priced 25.00 with ten units in stock."""

    product = crud.ProductRepository(session, org_id).add(
        {
            "name": "Vitamin C 500mg",
            "category": "Supplements",
            "selling_price": Decimal("25.00"),
            "cost": Decimal("15.00"),
            "unit": "tab",
            "branch_id": branch.id,
        }
    )
    crud.StockRepository(session, org_id).add(
        {
            "product_id": product.id,
            "branch_id": branch.id,
            "type": "in",
            "quantity": 10,
            "expiration_date": date.today() + timedelta(days=365),
        }
    )
    return product


@pytest.fixture(name="service")
def service_fixture(session: Session, org_id: int, branch: models.Branch) -> models.Service:
    category = crud.ServiceCategoryRepository(session, org_id).add({"name": "Consultation"})
    return crud.ServiceRepository(session, org_id).add(
        {
            "name": "General Check-up",
            "category_id": category.id,
            "base_price": Decimal("20.00"),
            "duration_minutes": 30,
            "branch_id": branch.id,
        }
    )
