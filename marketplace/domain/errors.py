# marketplace/domain/errors.py
"""
Domain errors raised by the services.

Routers translate them to HTTP responses: not-found -> 404,
invalid-state -> 400, conflict -> 409, transient -> 503. "Absent" and
"owned by someone else" are deliberately the same NotFoundError so callers
cannot discover other users' carts and orders.
"""


class MarketplaceError(Exception):
    message = "Marketplace error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class NotFoundError(MarketplaceError):
    message = "Resource not found"


class UserNotFound(NotFoundError):
    message = "User not found"


class ProductNotFound(NotFoundError):
    message = "Product not found"


class CartNotFound(NotFoundError):
    message = "Cart not found"


class CartItemNotFound(NotFoundError):
    message = "Cart item not found"


class OrderNotFound(NotFoundError):
    message = "Order not found"


class InvalidStateError(MarketplaceError):
    message = "Invalid state"


class InvalidQuantity(InvalidStateError):
    message = "Quantity must be at least 1"


class ProductUnavailable(InvalidStateError):
    message = "Product is not available"


class EmptyCart(InvalidStateError):
    message = "Cart is empty"


class ItemsUnavailable(InvalidStateError):
    message = "Some items in your cart are no longer available"

    def __init__(self, product_ids: list[int], message: str | None = None):
        super().__init__(message)
        self.product_ids = list(product_ids)


class InvalidStatusTransition(InvalidStateError):
    message = "Order status transition is not allowed"


class OrderNotProcessable(InvalidStateError):
    message = "Order could not be stored, check quantities and prices"


class ConflictError(MarketplaceError):
    message = "Resource conflict"


class TransientFailure(MarketplaceError):
    message = "Temporary failure, please retry"
