"""Domain exceptions raised by the cart and the commit workflow."""

from __future__ import annotations

from typing import Optional


class PosConsoleError(Exception):
    """Base exception for application-specific errors."""

    status_code = 500

    def __init__(self, message: str, *, step: Optional[str] = None) -> None:
        self.message = message
        self.step = step
        super().__init__(message)


class CartError(PosConsoleError):
    status_code = 422


class InvalidQuantityError(CartError):
    """Raised when a cart line would hold fewer than one unit."""


class CartLineNotFoundError(CartError):
    status_code = 404


class CartNotFoundError(CartError):
    status_code = 404


class CartBusyError(CartError):
    """Raised when a checkout finds the cart held by another request."""

    status_code = 409


class CheckoutError(PosConsoleError):
    """Terminal error of a commit workflow run."""


class CheckoutValidationError(CheckoutError):
    status_code = 422


class EmptyCartError(CheckoutValidationError):
    def __init__(self) -> None:
        super().__init__("Cart is empty", step="validating")


class MissingCustomerError(CheckoutValidationError):
    def __init__(self) -> None:
        super().__init__("Customer is required", step="validating")


class MissingPaymentTypeError(CheckoutValidationError):
    def __init__(self) -> None:
        super().__init__("Payment type is required", step="validating")


class UnknownCustomerError(CheckoutValidationError):
    status_code = 404

    def __init__(self, customer_id: int) -> None:
        super().__init__(f"Customer {customer_id} not found", step="validating")


class ReferenceGenerationError(CheckoutError):
    status_code = 503


class WriteError(CheckoutError):
    """A persistence step failed; the whole commit was rolled back."""


class HeaderWriteError(WriteError):
    pass


class ItemWriteError(WriteError):
    pass


class StockWriteError(WriteError):
    pass
