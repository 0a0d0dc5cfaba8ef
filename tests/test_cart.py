import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pos_console.cart import Cart, CartRegistry
from pos_console.exceptions import CartBusyError, CartLineNotFoundError, CartNotFoundError, InvalidQuantityError

PRODUCTS = [
    SimpleNamespace(id=1, name="Vitamin C", selling_price=Decimal("25.00"), unit="tab"),
    SimpleNamespace(id=2, name="Bandage", selling_price=Decimal("7.50"), unit="pc"),
]
SERVICES = [SimpleNamespace(id=1, name="Check-up", base_price=Decimal("20.00"))]


@pytest.fixture
def cart() -> Cart:
    return Cart(PRODUCTS, SERVICES, branch_id=1)


def test_new_cart_is_empty(cart: Cart) -> None:
    assert cart.is_empty()
    assert cart.total() == Decimal("0")
    assert cart.status == "idle"


def test_add_product_and_service(cart: Cart) -> None:
    assert cart.add_product(1, 2)
    assert cart.add_service(1)
    assert len(cart) == 2
    assert cart.total() == Decimal("70.00")
    assert [line.subtotal for line in cart.lines] == [Decimal("50.00"), Decimal("20.00")]
    assert cart.lines[0].unit == "tab"
    assert cart.lines[1].quantity == 1


def test_product_and_service_with_same_id_are_distinct(cart: Cart) -> None:
    assert cart.add_product(1)
    assert cart.add_service(1)
    assert cart.contains("product", 1)
    assert cart.contains("service", 1)


def test_duplicates_and_unknown_items_are_ignored(cart: Cart) -> None:
    assert cart.add_product(1)
    assert not cart.add_product(1, 5)
    assert not cart.add_product(99)
    assert not cart.add_service(42)
    assert len(cart) == 1
    assert cart.lines[0].quantity == 1


def test_quantity_must_be_positive(cart: Cart) -> None:
    with pytest.raises(InvalidQuantityError):
        cart.add_product(1, 0)
    cart.add_product(2)
    with pytest.raises(InvalidQuantityError):
        cart.update_quantity(0, 0)
    assert cart.lines[0].quantity == 1


def test_update_and_remove_lines(cart: Cart) -> None:
    cart.add_product(1)
    cart.add_product(2)
    cart.update_quantity(1, 4)
    assert cart.total() == Decimal("55.00")

    removed = cart.remove_line(0)
    assert removed.item_id == 1
    assert [line.item_id for line in cart.lines] == [2]

    with pytest.raises(CartLineNotFoundError):
        cart.remove_line(5)
    with pytest.raises(CartLineNotFoundError):
        cart.update_quantity(-1, 2)


def test_product_lines_and_clear(cart: Cart) -> None:
    cart.add_product(1)
    cart.add_service(1)
    assert [line.item_type for line in cart.product_lines()] == ["product"]
    cart.clear()
    assert cart.is_empty()


def test_registry_lifecycle() -> None:
    registry = CartRegistry()
    cart_id, cart = registry.open(branch_id=3)
    assert registry.get(cart_id) is cart
    assert cart.branch_id == 3
    assert len(registry) == 1

    registry.discard(cart_id)
    assert len(registry) == 0
    with pytest.raises(CartNotFoundError):
        registry.get(cart_id)
    with pytest.raises(CartNotFoundError):
        registry.discard(cart_id)


def test_updated_quantity_drives_subtotal_and_total(cart: Cart) -> None:
    cart.add_product(1, 2)
    cart.update_quantity(0, 5)
    assert cart.lines[0].subtotal == Decimal("125.00")
    assert cart.total() == Decimal("125.00")


def test_concurrent_adds_keep_a_single_line(cart: Cart) -> None:
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: cart.add_product(1), range(64)))
    assert results.count(True) == 1
    assert len(cart) == 1


def test_checkout_guard_refuses_a_second_holder(cart: Cart) -> None:
    held = threading.Event()
    release = threading.Event()

    def checkout() -> None:
        with cart.checkout_guard():
            held.set()
            release.wait(5)

    worker = threading.Thread(target=checkout)
    worker.start()
    try:
        assert held.wait(5)
        with pytest.raises(CartBusyError) as excinfo:
            with cart.checkout_guard():
                pass
        assert excinfo.value.status_code == 409
    finally:
        release.set()
        worker.join()

    with cart.checkout_guard():
        assert cart.add_product(1)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_registry_drops_idle_carts() -> None:
    clock = FakeClock()
    registry = CartRegistry(max_idle=60, clock=clock)
    stale_id, _ = registry.open(branch_id=1)
    clock.now = 30
    fresh_id, _ = registry.open(branch_id=1)

    clock.now = 80
    assert registry.get(fresh_id).branch_id == 1
    with pytest.raises(CartNotFoundError):
        registry.get(stale_id)
    assert len(registry) == 1


def test_registry_caps_open_carts() -> None:
    clock = FakeClock()
    registry = CartRegistry(max_carts=2, clock=clock)
    first, _ = registry.open()
    clock.now = 1
    second, _ = registry.open()
    clock.now = 2
    registry.get(first)

    clock.now = 3
    third, _ = registry.open()
    assert len(registry) == 2
    registry.get(first)
    registry.get(third)
    with pytest.raises(CartNotFoundError):
        registry.get(second)
