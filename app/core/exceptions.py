"""
Domain error taxonomy.

Services raise these; the API layer maps them to HTTP responses through the
exception handler registered in app.main. Every error carries a message that
is safe to show to the caller verbatim.
"""
from typing import Any, Optional
import uuid


class InventoryHubError(Exception):
    """Base class for all errors surfaced to API callers."""
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        """Additional fields included in the error response body."""
        return {}


class InvalidRequestError(InventoryHubError):
    """Malformed input: empty cart, non-positive quantity, missing field."""
    status_code = 400


class ProductNotFoundError(InventoryHubError):
    status_code = 404

    def __init__(self, product_id: Any):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id

    def extra(self) -> dict[str, Any]:
        return {"product_id": str(self.product_id)}


class InsufficientStockError(InventoryHubError):
    """Raised when a decrement would drive a stock record negative."""
    status_code = 400

    def __init__(
        self,
        product_id: uuid.UUID,
        available: int,
        required: int,
        product_name: Optional[str] = None,
    ):
        label = product_name or str(product_id)
        super().__init__(
            f"Not enough stock for {label} (Available: {available}, Required: {required})"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.required = required

    def extra(self) -> dict[str, Any]:
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "available": self.available,
            "required": self.required,
        }


class OrderNotFoundError(InventoryHubError):
    status_code = 404

    def __init__(self, order_id: Any):
        super().__init__("Order not found")
        self.order_id = order_id

    def extra(self) -> dict[str, Any]:
        return {"order_id": str(self.order_id)}


class InvalidStatusError(InventoryHubError):
    status_code = 400

    def __init__(self, status: Any):
        super().__init__(f"Invalid status: {status}")
        self.status = status

    def extra(self) -> dict[str, Any]:
        return {"status": str(self.status)}


class AccessDeniedError(InventoryHubError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class DuplicateResourceError(InventoryHubError):
    """Unique field (SKU, e-mail) already taken."""
    status_code = 409


class OrderCreationError(InventoryHubError):
    """Infrastructure failure while committing an order. Nothing was applied."""
    status_code = 500

    def __init__(self, message: str = "Order creation failed: Database error"):
        super().__init__(message)
