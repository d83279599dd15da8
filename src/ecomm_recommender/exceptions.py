"""Custom exceptions for the recommender service.

Each exception carries the HTTP status code the API layer responds with.
"""

from typing import Any


class RecommenderError(Exception):
    """Base exception for recommender errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ProductNotFoundError(RecommenderError):
    """Raised when the catalog has no product with the given id."""

    def __init__(self, product_id: int):
        super().__init__(
            message=f"Product {product_id} not found",
            status_code=404,
            details={"product_id": product_id},
        )
        self.product_id = product_id


class LikeNotFoundError(RecommenderError):
    """Raised when removing a like that was never recorded."""

    def __init__(self, user_id: int, product_id: int):
        super().__init__(
            message=f"User {user_id} has not liked product {product_id}",
            status_code=404,
            details={"user_id": user_id, "product_id": product_id},
        )


class InvalidInteractionError(RecommenderError):
    """Raised when an interaction payload fails a business rule."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=400, details=details)


class InsufficientStockError(RecommenderError):
    """Raised when a purchase asks for more units than are in stock."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            message=(
                f"Insufficient stock for product {product_id}: "
                f"requested {requested}, available {available}"
            ),
            status_code=409,
            details={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


class InteractionStoreError(RecommenderError):
    """Raised when interaction events cannot be read or written."""

    def __init__(self, operation: str, error: Exception):
        super().__init__(
            message=f"Interaction store failed during {operation}",
            status_code=503,
            details={
                "operation": operation,
                "error_type": type(error).__name__,
            },
        )


class CatalogError(RecommenderError):
    """Raised when the product catalog is unreachable or errors."""

    def __init__(self, operation: str, error: Exception):
        super().__init__(
            message=f"Product catalog failed during {operation}",
            status_code=503,
            details={
                "operation": operation,
                "error_type": type(error).__name__,
            },
        )
