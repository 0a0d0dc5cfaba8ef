from fastapi.testclient import TestClient
from sqlmodel import Session

from pos_console import models
from pos_console.app import create_app
from pos_console.config import get_settings

from .conftest import ADMIN_PASSWORD, login


def test_health_is_public(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_api_requires_session_cookie(client: TestClient) -> None:
    response = client.get("/api/v1/customers")
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"


def test_login_me_logout(client: TestClient, admin: models.User) -> None:
    response = client.post("/api/v1/auth/login", json={"email": admin.email, "password": "wrong-password"})
    assert response.status_code == 401

    login(client, "ADMIN@example.com", ADMIN_PASSWORD)
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 200
    assert response.json()["email"] == "admin@example.com"
    assert "hashed_password" not in response.json()

    assert client.post("/api/v1/auth/logout").status_code == 200
    assert client.get("/api/v1/auth/me").status_code == 401


def test_tampered_cookie_is_rejected(client: TestClient, admin: models.User) -> None:
    client.cookies.set("pos_console_session", f"{admin.id}:0.bogus")
    assert client.get("/api/v1/auth/me").status_code == 401


def test_deactivated_user_loses_access(admin_client: TestClient, session: Session, admin: models.User) -> None:
    admin.is_active = False
    session.add(admin)
    session.commit()
    assert admin_client.get("/api/v1/auth/me").status_code == 401


def test_plain_users_are_kept_off_admin_screens(clerk_client: TestClient) -> None:
    assert clerk_client.get("/api/v1/products").status_code == 403
    assert clerk_client.get("/api/v1/staff").status_code == 403
    assert clerk_client.get("/api/v1/households/search", params={"q": "santos"}).status_code == 403
    assert clerk_client.get("/api/v1/customers").status_code == 200
    assert clerk_client.get("/api/v1/transactions").status_code == 200


def test_unlisted_origins_get_no_cors_grant(admin_client: TestClient) -> None:
    response = admin_client.get("/api/v1/auth/me", headers={"Origin": "https://evil.example"})
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers
    assert "access-control-allow-credentials" not in response.headers


def test_listed_origins_get_credentialed_cors(db_engine, monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "cors_origins", ["https://pos.example"])
    with TestClient(create_app()) as client:
        response = client.get("/health", headers={"Origin": "https://pos.example"})
        assert response.headers["access-control-allow-origin"] == "https://pos.example"
        assert response.headers["access-control-allow-credentials"] == "true"

        response = client.get("/health", headers={"Origin": "https://evil.example"})
        assert "access-control-allow-origin" not in response.headers


def test_wildcard_origin_is_served_without_credentials(db_engine, monkeypatch) -> None:
    monkeypatch.setattr(get_settings(), "cors_origins", ["*"])
    with TestClient(create_app()) as client:
        response = client.get("/health", headers={"Origin": "https://evil.example"})
        assert response.headers["access-control-allow-origin"] == "*"
        assert "access-control-allow-credentials" not in response.headers
