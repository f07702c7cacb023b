"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class StockLedgerError(Exception):
    """Base exception for all stock ledger errors."""

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


# Storage Exceptions
class StorageError(StockLedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Lookup Exceptions
class NotFoundError(StockLedgerError):
    """Referenced record does not exist."""

    def __init__(self, entity: str, entity_id: str, code: str | None = None):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code=code or "NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class MaterialNotFoundError(NotFoundError):
    """Raw material not found."""

    def __init__(self, material_id: str):
        super().__init__("Raw material", material_id, code="MATERIAL_NOT_FOUND")


class SectionNotFoundError(NotFoundError):
    """Section not found."""

    def __init__(self, section_id: str):
        super().__init__("Section", section_id, code="SECTION_NOT_FOUND")


class StockEntryNotFoundError(NotFoundError):
    """Stock entry not found."""

    def __init__(self, entry_id: str):
        super().__init__("Stock entry", entry_id, code="STOCK_ENTRY_NOT_FOUND")


class SectionInventoryNotFoundError(NotFoundError):
    """Section inventory row not found."""

    def __init__(self, inventory_id: str):
        super().__init__(
            "Section inventory", inventory_id, code="SECTION_INVENTORY_NOT_FOUND"
        )


# Stock Exceptions
class InsufficientStockError(StockLedgerError):
    """Requested quantity exceeds the available pool."""

    def __init__(
        self,
        material_id: str,
        requested: float,
        available: float,
        pool: str = "central",
        section_id: str | None = None,
    ):
        where = f"section {section_id}" if section_id else "stock"
        super().__init__(
            f"Insufficient {where} for material {material_id}: "
            f"requested {requested:g}, available {available:g}",
            code="INSUFFICIENT_STOCK",
            details={
                "material_id": material_id,
                "requested": requested,
                "available": available,
                "pool": pool,
                "section_id": section_id,
            },
        )


class EntryInUseError(StockLedgerError):
    """Stock entry is referenced by movements and cannot be removed."""

    def __init__(self, entry_id: str, movement_count: int):
        super().__init__(
            f"Cannot delete stock entry {entry_id} with {movement_count} associated movements",
            code="ENTRY_IN_USE",
            details={"entry_id": entry_id, "movement_count": movement_count},
        )


# Validation Exceptions
class ValidationError(StockLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(StockLedgerError):
    """Configuration error."""

    pass
