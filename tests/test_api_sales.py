from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient
from freezegun import freeze_time
from sqlmodel import Session, select

from pos_console import models
from pos_console.checkout import TransactionCommitWorkflow
from pos_console.exceptions import ItemWriteError


def _open_cart(client: TestClient, branch_id: int) -> str:
    response = client.post("/api/v1/carts", json={"branch_id": branch_id})
    assert response.status_code == 201, response.text
    return response.json()["id"]


def test_catalog_stock_checkout_flow(admin_client: TestClient, branch: models.Branch) -> None:
    client = admin_client

    # catalog
    response = client.post(
        "/api/v1/products",
        json={"name": "Paracetamol 500mg", "selling_price": "25.00", "unit": "tab", "branch_id": branch.id},
    )
    assert response.status_code == 201, response.text
    product_id = response.json()["id"]

    response = client.post("/api/v1/service-categories", json={"name": "Consultation"})
    assert response.status_code == 201, response.text
    response = client.post(
        "/api/v1/services",
        json={"name": "Check-up", "base_price": "20.00", "category_id": response.json()["id"]},
    )
    assert response.status_code == 201, response.text
    service_id = response.json()["id"]

    # no stock yet, so the product cannot be sold
    cart_id = _open_cart(client, branch.id)
    response = client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "product", "item_id": product_id})
    assert response.status_code == 422

    # receive stock
    response = client.post("/api/v1/product-stocks", json={"product_id": product_id, "quantity": 10})
    assert response.status_code == 201, response.text
    assert response.json()["type"] == "in"
    assert response.json()["product_name"] == "Paracetamol 500mg"

    response = client.post("/api/v1/customers", json={"name": "Juan Dela Cruz", "branch_id": branch.id})
    assert response.status_code == 201, response.text
    customer_id = response.json()["id"]

    # build the cart
    response = client.post(
        f"/api/v1/carts/{cart_id}/lines", json={"item_type": "product", "item_id": product_id, "quantity": 2}
    )
    assert response.status_code == 201, response.text
    response = client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "service", "item_id": service_id})
    assert response.status_code == 201, response.text
    cart = response.json()
    assert len(cart["lines"]) == 2
    assert Decimal(cart["total"]) == Decimal("70")

    # duplicates are refused
    response = client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "service", "item_id": service_id})
    assert response.status_code == 422

    response = client.patch(f"/api/v1/carts/{cart_id}/lines/0", json={"quantity": 0})
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidQuantityError"

    # validation failure leaves the cart untouched
    response = client.post(f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": customer_id})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "MissingPaymentTypeError"
    assert body["step"] == "validating"
    assert client.get(f"/api/v1/carts/{cart_id}").json()["status"] == "idle"

    response = client.post(
        f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": customer_id, "payment_type": "cash"}
    )
    assert response.status_code == 201, response.text
    receipt = response.json()
    assert receipt["status"] == "committed"
    assert receipt["transaction_number"].startswith(date.today().strftime("%Y%m%d") + "-")
    assert Decimal(receipt["total_amount"]) == Decimal("70")

    cart = client.get(f"/api/v1/carts/{cart_id}").json()
    assert cart["lines"] == []
    assert cart["status"] == "committed"

    # stock went down by the quantity sold
    response = client.get(f"/api/v1/products/{product_id}")
    assert response.json()["stock_qty"] == 8
    response = client.get(f"/api/v1/products/{product_id}/stock")
    assert response.json()["total_out"] == 2

    # transaction detail carries named items
    transaction_id = receipt["transaction_id"]
    detail = client.get(f"/api/v1/transactions/{transaction_id}").json()
    assert detail["customer_name"] == "Juan Dela Cruz"
    assert sorted(item["name"] for item in detail["items"]) == ["Check-up", "Paracetamol 500mg"]

    response = client.patch(f"/api/v1/transactions/{transaction_id}", json={"reference_number": "OR-0001"})
    assert response.status_code == 200
    assert response.json()["reference_number"] == "OR-0001"

    # one unit returned
    product_item = next(item for item in detail["items"] if item["item_type"] == "product")
    response = client.patch(
        f"/api/v1/transactions/{transaction_id}/items/{product_item['id']}", json={"quantity": 1}
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "returned"
    assert Decimal(response.json()["total_amount"]) == Decimal("45")

    response = client.patch(
        f"/api/v1/transactions/{transaction_id}/items/{product_item['id']}", json={"quantity": 5}
    )
    assert response.status_code == 422

    history = client.get(f"/api/v1/customers/{customer_id}/transactions").json()
    assert [t["id"] for t in history] == [transaction_id]
    assert len(history[0]["items"]) == 2

    summary = client.get("/api/v1/dashboard", params={"branch_id": branch.id}).json()
    assert summary["transactions_today"] == 1
    assert Decimal(summary["sales_today"]) == Decimal("45")

    # referenced rows cannot be deleted
    response = client.delete(f"/api/v1/customers/{customer_id}")
    assert response.status_code == 409
    assert response.json()["detail"] == "Selected record cannot be deleted."


def test_failed_write_rolls_back_over_the_api(
    admin_client: TestClient, session: Session, branch, customer, product, monkeypatch
) -> None:
    def broken(self, header, cart):
        raise ItemWriteError("disk full", step="persisting_items")

    monkeypatch.setattr(TransactionCommitWorkflow, "_persist_items", broken)

    cart_id = _open_cart(admin_client, branch.id)
    admin_client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "product", "item_id": product.id})

    response = admin_client.post(
        f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": customer.id, "payment_type": "cash"}
    )
    assert response.status_code == 500
    assert response.json() == {"error": "ItemWriteError", "step": "persisting_items", "detail": "disk full"}
    assert session.exec(select(models.Transaction)).all() == []

    cart = admin_client.get(f"/api/v1/carts/{cart_id}").json()
    assert cart["status"] == "failed"
    assert len(cart["lines"]) == 1


def test_checkout_unknown_customer_and_cart(admin_client: TestClient, branch, product) -> None:
    cart_id = _open_cart(admin_client, branch.id)
    admin_client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "product", "item_id": product.id})

    response = admin_client.post(f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": 999, "payment_type": "cash"})
    assert response.status_code == 404
    assert response.json()["error"] == "UnknownCustomerError"

    assert admin_client.get("/api/v1/carts/does-not-exist").status_code == 404
    assert admin_client.delete(f"/api/v1/carts/{cart_id}").status_code == 204
    assert admin_client.get(f"/api/v1/carts/{cart_id}").status_code == 404


def test_empty_cart_checkout(admin_client: TestClient, branch, customer) -> None:
    cart_id = _open_cart(admin_client, branch.id)
    response = admin_client.post(
        f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": customer.id, "payment_type": "cash"}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "EmptyCartError"


def test_empty_cart_is_reported_before_an_unknown_customer(admin_client: TestClient, branch) -> None:
    cart_id = _open_cart(admin_client, branch.id)
    response = admin_client.post(f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": 999, "payment_type": "cash"})
    assert response.status_code == 422
    assert response.json()["error"] == "EmptyCartError"


def test_cart_in_checkout_cannot_be_checked_out_again(
    admin_client: TestClient, session: Session, branch, customer, product
) -> None:
    cart_id = _open_cart(admin_client, branch.id)
    admin_client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "product", "item_id": product.id})
    body = {"customer_id": customer.id, "payment_type": "cash"}

    # another request is still committing this cart
    with admin_client.app.state.carts.get(cart_id).checkout_guard():
        response = admin_client.post(f"/api/v1/carts/{cart_id}/checkout", json=body)
    assert response.status_code == 409
    assert response.json()["error"] == "CartBusyError"
    assert len(admin_client.get(f"/api/v1/carts/{cart_id}").json()["lines"]) == 1

    assert admin_client.post(f"/api/v1/carts/{cart_id}/checkout", json=body).status_code == 201
    response = admin_client.post(f"/api/v1/carts/{cart_id}/checkout", json=body)
    assert response.status_code == 422
    assert response.json()["error"] == "EmptyCartError"
    assert len(session.exec(select(models.Transaction)).all()) == 1


def test_dashboard_counts_sales_of_the_local_day(admin_client: TestClient, branch, customer, product) -> None:
    # 23:00 UTC is already the next morning at UTC+8
    with freeze_time("2024-03-14 23:00:00", tz_offset=8, real_asyncio=True):
        cart_id = _open_cart(admin_client, branch.id)
        admin_client.post(f"/api/v1/carts/{cart_id}/lines", json={"item_type": "product", "item_id": product.id})
        response = admin_client.post(
            f"/api/v1/carts/{cart_id}/checkout", json={"customer_id": customer.id, "payment_type": "cash"}
        )
        assert response.status_code == 201, response.text
        assert response.json()["transaction_number"] == "20240315-1"

        today = admin_client.get("/api/v1/dashboard", params={"branch_id": branch.id}).json()
        yesterday = admin_client.get(
            "/api/v1/dashboard", params={"branch_id": branch.id, "day": "2024-03-14"}
        ).json()

    assert today["day"] == "2024-03-15"
    assert today["transactions_today"] == 1
    assert Decimal(today["sales_today"]) == Decimal("25")
    assert yesterday["transactions_today"] == 0
