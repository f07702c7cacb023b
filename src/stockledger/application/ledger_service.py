"""
Query/command interface over the ledger.

Every method returns an ``OperationResult`` and never raises for domain or
storage failures. The store is passed in explicitly; nothing here holds
global state.
"""

from stockledger.application.dto.requests import (
    AssignStockRequest,
    CreateStockEntryRequest,
    CreateStockMovementRequest,
    RecordConsumptionRequest,
    TransferStockRequest,
)
from stockledger.application.dto.responses import OperationResult
from stockledger.application.use_cases import (
    AssignStockToSectionUseCase,
    CreateStockEntryUseCase,
    CreateStockMovementUseCase,
    GetCurrentStockLevelsUseCase,
    GetStockLevelUseCase,
    RecordConsumptionUseCase,
    TransferStockUseCase,
)
from stockledger.core.entities.stock import StockEntry, StockLevel, StockMovement
from stockledger.core.interfaces.ledger_store import ILedgerStore


class StockLedgerService:
    """Facade over the stock use cases for callers that want envelopes."""

    def __init__(self, store: ILedgerStore):
        self._store = store

    async def get_current_stock_levels(self) -> OperationResult[list[StockLevel]]:
        return await GetCurrentStockLevelsUseCase(self._store).run()

    async def get_stock_level(self, material_id: str) -> OperationResult[StockLevel | None]:
        return await GetStockLevelUseCase(self._store).run(material_id)

    async def create_entry(self, request: CreateStockEntryRequest) -> OperationResult[StockEntry]:
        return await CreateStockEntryUseCase(self._store).run(request)

    async def create_movement(
        self, request: CreateStockMovementRequest
    ) -> OperationResult[StockMovement]:
        return await CreateStockMovementUseCase(self._store).run(request)

    async def transfer_stock(self, request: TransferStockRequest) -> OperationResult[bool]:
        return await TransferStockUseCase(self._store).run(request)

    async def assign_stock_to_section(self, request: AssignStockRequest) -> OperationResult[bool]:
        return await AssignStockToSectionUseCase(self._store).run(request)

    async def record_consumption(self, request: RecordConsumptionRequest) -> OperationResult[bool]:
        return await RecordConsumptionUseCase(self._store).run(request)
