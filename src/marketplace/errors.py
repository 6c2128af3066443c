"""Marketplace error taxonomy.

Every error a caller can see derives from ``MarketplaceError`` and knows the
HTTP status class it maps to. ``EstimatorUnavailable`` is internal to the
checkout flow and never reaches a caller.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StockShortfall:
    """A product that cannot cover the requested quantity."""

    product_id: str
    product_name: str
    requested: int
    available: int

    def describe(self) -> str:
        return f"{self.product_name}: requested {self.requested}, available {self.available}"


class MarketplaceError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = list(self.errors)
        if self.retryable:
            body["retryable"] = True
        return body


# ---------------------------------------------------------------------------
# 400: validation
# ---------------------------------------------------------------------------
class EmptyCartError(MarketplaceError):
    status_code = 400

    def __init__(self, message: str = "Cart is empty") -> None:
        super().__init__(message)


class EmptyOrderError(MarketplaceError):
    status_code = 400

    def __init__(self, message: str = "Items array is required and cannot be empty") -> None:
        super().__init__(message)


class InsufficientStockError(MarketplaceError):
    status_code = 400

    def __init__(self, shortfalls: list[StockShortfall]) -> None:
        self.shortfalls = list(shortfalls)
        super().__init__(
            "Insufficient stock for one or more products",
            errors=[s.describe() for s in self.shortfalls],
        )


# ---------------------------------------------------------------------------
# 403 / 404 / 409
# ---------------------------------------------------------------------------
class OrderOwnershipError(MarketplaceError):
    status_code = 403

    def __init__(self, message: str = "Not authorized to modify this order") -> None:
        super().__init__(message)


class ProductNotFoundError(MarketplaceError):
    status_code = 404

    def __init__(self, product_id: str) -> None:
        self.product_id = str(product_id)
        super().__init__(f"Product with ID {product_id} not found")


class CartNotFoundError(MarketplaceError):
    status_code = 404

    def __init__(self, message: str = "Cart not found") -> None:
        super().__init__(message)


class ProductNotInCartError(MarketplaceError):
    status_code = 404

    def __init__(self, product_id: str) -> None:
        self.product_id = str(product_id)
        super().__init__("Product not found in cart")


class OrderNotFoundError(MarketplaceError):
    status_code = 404

    def __init__(self, order_id: str) -> None:
        self.order_id = str(order_id)
        super().__init__("Order not found")


class OrderStateError(MarketplaceError):
    status_code = 409


class ConcurrentUpdateError(MarketplaceError):
    """Another request changed the same records first; retrying is safe."""

    status_code = 409
    retryable = True

    def __init__(self, message: str = "The order was modified concurrently, please retry") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# 500: commit failures
# ---------------------------------------------------------------------------
class StockDepletedError(Exception):
    """Raised inside the commit unit of work to force a full rollback.

    Never surfaces to callers; the checkout engine translates it into a
    ``CheckoutTransactionError``.
    """

    def __init__(self, shortfalls: list[StockShortfall]) -> None:
        super().__init__("Stock became insufficient during commit")
        self.shortfalls = list(shortfalls)


class CheckoutTransactionError(MarketplaceError):
    status_code = 500
    retryable = True

    def __init__(self, message: str = "Order could not be placed, please retry", shortfalls=None) -> None:
        self.shortfalls = list(shortfalls or [])
        super().__init__(message, errors=[s.describe() for s in self.shortfalls])


class EstimatorUnavailable(Exception):
    """The delivery estimator could not produce a usable estimate."""
