# market/core/errors.py
# Business exceptions raised by the services and turned into JSON responses in main.py.


class MarketError(Exception):
    """Base class for all business errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketError):
    """Bad input; the message echoes the violated rule."""

    status_code = 400
    default_message = "Invalid request"


class Unauthorized(MarketError):
    status_code = 401
    default_message = "Could not validate credentials"


class Forbidden(MarketError):
    status_code = 403
    default_message = "Insufficient privileges"


class NotFound(MarketError):
    status_code = 404
    default_message = "Not found"


class ProductNotFound(NotFound):
    default_message = "Product not found"


class CategoryNotFound(NotFound):
    default_message = "Category not found"


class CartItemNotFound(NotFound):
    default_message = "Product is not in the cart"


class OrderNotFound(NotFound):
    default_message = "Order not found"


class UserNotFound(NotFound):
    default_message = "User not found"


class Conflict(MarketError):
    status_code = 409
    default_message = "Conflict"


class OutOfStock(Conflict):
    default_message = "Product out of stock"


class InvalidTransition(Conflict):
    default_message = "Invalid order status transition"


class PaymentError(MarketError):
    status_code = 400
    default_message = "Payment failed"


class StorageError(MarketError):
    """Backing-store failure. The message is the generic 'failed to X' text shown to clients."""

    status_code = 500
    default_message = "Storage failure"
