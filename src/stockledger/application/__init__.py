"""
Application layer - use cases, DTOs and the ledger service facade.

This layer orchestrates business logic by:
1. Defining request/response DTOs
2. Implementing use cases that coordinate core services
3. Wrapping every outcome in an OperationResult envelope

Use cases are the only entry point for API handlers.
"""

from stockledger.application.dto.responses import ErrorResponse, HealthResponse, OperationResult
from stockledger.application.ledger_service import StockLedgerService
from stockledger.application.use_cases.base import LedgerUseCase

__all__ = [
    "OperationResult",
    "ErrorResponse",
    "HealthResponse",
    "LedgerUseCase",
    "StockLedgerService",
]
