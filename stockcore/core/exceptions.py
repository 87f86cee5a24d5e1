"""
Domain exceptions for the stock engine.

Every error carries a machine-readable code and structured details so
calling layers can map them without parsing messages.
"""

from typing import Any


class StockError(Exception):
    """Base exception for all stock engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation
class ValidationError(StockError):
    """Malformed input."""

    def __init__(self, field: str, message: str, value: Any = None, **extra: Any):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={"field": field, "reason": message, "value": value, **extra},
        )


# Not found
class NotFoundError(StockError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class LocationNotFoundError(NotFoundError):
    def __init__(self, location_id: Any):
        super().__init__("Location", location_id)


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id: Any):
        super().__init__("Item", item_id)


class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: Any):
        super().__init__("Category", category_id)


class DocumentNotFoundError(NotFoundError):
    """Transfer, inventory count, sale, purchase order, delivery or order."""

    def __init__(self, document: str, document_id: Any):
        super().__init__(document, document_id)


# Business rules
class InsufficientQuantityError(StockError):
    """Balance cannot cover the requested decrease."""

    def __init__(self, location_id: int, item_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for item {item_id} at location {location_id}: "
            f"available {available}, requested {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "location_id": location_id,
                "item_id": item_id,
                "available": available,
                "requested": requested,
            },
        )


class ConflictError(StockError):
    """Operation conflicts with the current state of a document."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, code="CONFLICT", details=details)


class IllegalTransitionError(ConflictError):
    def __init__(self, document: str, current: str, requested: str, allowed: list[str]):
        super().__init__(
            f"{document} cannot move from {current} to {requested}",
            details={
                "document": document,
                "current": current,
                "requested": requested,
                "allowed": allowed,
            },
        )


class OverFulfillmentError(ConflictError):
    """Cumulative fulfilled quantity would exceed the ordered quantity."""

    def __init__(self, line_id: int | None, ordered: int, already: int, trying: int):
        super().__init__(
            f"Line {line_id} would exceed its ordered quantity "
            f"({already} + {trying} > {ordered})",
            details={
                "line_id": line_id,
                "ordered": ordered,
                "already_delivered": already,
                "trying_to_deliver": trying,
            },
        )


# Internal
class InternalError(StockError):
    """Unexpected failure inside the engine."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, details=details)


class NumberingExhaustedError(InternalError):
    def __init__(self, prefix: str, attempts: int):
        super().__init__(
            f"Could not allocate a unique {prefix} number after {attempts} attempts",
            details={"prefix": prefix, "attempts": attempts},
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(InternalError):
    """Invalid or missing configuration."""

    def __init__(self, setting: str, reason: str):
        super().__init__(
            f"Configuration error for '{setting}': {reason}",
            details={"setting": setting, "reason": reason},
        )


class DuplicateNumberError(InternalError):
    """A document number collided with an existing one."""

    def __init__(self, document: str, number: str):
        super().__init__(
            f"{document} number already in use: {number}",
            code="DUPLICATE_NUMBER",
            details={"document": document, "number": number},
        )
