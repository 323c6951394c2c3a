# backend/services/errors.py
from typing import Any, Dict, Optional


class ShopError(Exception):
    """Business error with an HTTP status and a machine readable code.

    Extra keyword arguments are carried as context and returned to the
    client next to the message (e.g. product_id, requested, available).
    """

    status_code = 400
    code = "shop_error"
    message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.context}


# --- Validation ---

class InvalidQuantity(ShopError):
    code = "invalid_quantity"
    message = "Quantity must be a whole number of at least 1"


class EmptyCart(ShopError):
    code = "empty_cart"
    message = "Cart is empty"


class DuplicateUser(ShopError):
    code = "duplicate_user"
    message = "Username or email already registered"


# --- Lookups ---

class ProductNotFound(ShopError):
    status_code = 404
    code = "product_not_found"
    message = "Product not found"


class OrderNotFound(ShopError):
    status_code = 404
    code = "order_not_found"
    message = "Order not found"


class UserNotFound(ShopError):
    status_code = 404
    code = "user_not_found"
    message = "User not found"


# --- Stock and state ---

class OutOfStock(ShopError):
    status_code = 409
    code = "out_of_stock"
    message = "Insufficient stock"


class InsufficientStock(ShopError):
    status_code = 409
    code = "insufficient_stock"
    message = "Insufficient stock"


class InvalidStatusTransition(ShopError):
    status_code = 409
    code = "invalid_status_transition"
    message = "Order status cannot be changed"


# --- Authorization ---

class Unauthorized(ShopError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required"

    def __init__(self, message: Optional[str] = None, status_code: int = 401, **context: Any):
        super().__init__(message, **context)
        self.status_code = status_code


# --- Infrastructure ---

class CheckoutFailed(ShopError):
    status_code = 500
    code = "internal_error"
    message = "Order could not be created"
