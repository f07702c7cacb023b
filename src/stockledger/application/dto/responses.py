"""Response DTOs.

Pydantic v2 models for use case results and API responses.
"""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from stockledger.core.exceptions import StockLedgerError

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """Result envelope returned by every query and command.

    A failed result carries placeholder ``data`` (None, False or an empty
    list) and the reason in ``message`` and ``error_code``.
    """

    data: T
    success: bool = True
    message: str | None = None
    error_code: str | None = Field(default=None, description="Machine-readable error code on failure")

    @classmethod
    def ok(cls, data: T, message: str | None = None) -> "OperationResult[T]":
        return cls(data=data, success=True, message=message)

    @classmethod
    def fail(cls, error: StockLedgerError, placeholder: T) -> "OperationResult[T]":
        return cls(data=placeholder, success=False, message=error.message, error_code=error.code)


class ComponentHealth(BaseModel):
    """Health of one dependency."""

    status: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealth | None = None
    schema_version: str | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. MATERIAL_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class InventoryValueResponse(BaseModel):
    """Current value of available stock."""

    total_value: float = Field(..., description="Sum of available quantity times unit cost")
    by_category: dict[str, float] = Field(default_factory=dict)
    material_count: int = 0
    low_stock_count: int = 0
    allocated_value: float = Field(default=0.0, description="Value currently held in sections")
