# storefront/domain/errors.py
"""
Bledy domenowe. Kazdy ma stabilny `kind` (do sprawdzania przez klienta)
i kod HTTP, na ktory tlumacza go routery.
"""


class ShopError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    default_message = "Request failed"

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFound(ShopError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class Unauthorized(ShopError):
    kind = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ShopError):
    kind = "forbidden"
    status_code = 403
    default_message = "Access denied"


class OutOfStock(ShopError):
    kind = "out_of_stock"
    status_code = 400
    default_message = "Not enough stock"


class InsufficientStock(ShopError):
    kind = "insufficient_stock"
    status_code = 400

    def __init__(self, article_number: str, size: str, message: str | None = None):
        self.article_number = article_number
        self.size = size
        super().__init__(message or f"Insufficient stock for {article_number} size {size}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["articleNumber"] = self.article_number
        data["size"] = self.size
        return data


class InvalidTransition(ShopError):
    kind = "invalid_transition"
    status_code = 409

    def __init__(self, current, target, message: str | None = None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot change order status from {current} to {target}")


class EmptyCart(ShopError):
    kind = "empty_cart"
    status_code = 400
    default_message = "Cart is empty"


class VerificationFailed(ShopError):
    kind = "verification_failed"
    status_code = 400
    default_message = "Bot verification failed"


class Conflict(ShopError):
    kind = "conflict"
    status_code = 409
    default_message = "Conflicting update, please retry"


class InvalidRequest(ShopError):
    kind = "invalid_request"
    status_code = 400
    default_message = "Invalid request"


class InvalidQuantity(InvalidRequest):
    kind = "invalid_quantity"
    default_message = "Quantity must be greater than 0"
