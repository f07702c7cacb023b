"""Data Transfer Objects.

Request DTOs: validate and parse incoming commands and queries.
Response DTOs: result envelopes and API response bodies.
"""

from stockledger.application.dto.requests import (
    AssignStockBody,
    AssignStockRequest,
    ConsumptionQuery,
    CreateMaterialRequest,
    CreateSectionRequest,
    CreateStockEntryRequest,
    CreateStockMovementRequest,
    EntryQuery,
    MovementQuery,
    RecordConsumptionBody,
    RecordConsumptionRequest,
    RemoveSectionInventoryRequest,
    ReportQuery,
    TransferStockRequest,
    UpdateMaterialRequest,
    UpdateSectionInventoryRequest,
    UpdateSectionRequest,
    UpdateStockEntryRequest,
)
from stockledger.application.dto.responses import (
    ComponentHealth,
    ErrorResponse,
    HealthResponse,
    InventoryValueResponse,
    OperationResult,
)

__all__ = [
    # Requests
    "CreateMaterialRequest",
    "UpdateMaterialRequest",
    "CreateStockEntryRequest",
    "UpdateStockEntryRequest",
    "CreateStockMovementRequest",
    "TransferStockRequest",
    "CreateSectionRequest",
    "UpdateSectionRequest",
    "AssignStockBody",
    "AssignStockRequest",
    "RecordConsumptionBody",
    "RecordConsumptionRequest",
    "UpdateSectionInventoryRequest",
    "RemoveSectionInventoryRequest",
    "MovementQuery",
    "EntryQuery",
    "ConsumptionQuery",
    "ReportQuery",
    # Responses
    "OperationResult",
    "ErrorResponse",
    "HealthResponse",
    "ComponentHealth",
    "InventoryValueResponse",
]
