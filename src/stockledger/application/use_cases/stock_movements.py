"""Stock movement use cases."""

from stockledger.application.dto.requests import (
    CreateStockMovementRequest,
    MovementQuery,
    TransferStockRequest,
)
from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.core.entities.stock import StockMovement
from stockledger.core.services.movement_recorder import MovementRecorder


class CreateStockMovementUseCase(LedgerUseCase):
    """Append an OUT, EXPIRED, DAMAGED, ADJUSTMENT or TRANSFER movement."""

    async def execute(self, request: CreateStockMovementRequest) -> StockMovement:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.record_movement(
            stock_entry_id=request.stock_entry_id,
            movement_type=request.type,
            quantity=request.quantity,
            reason=request.reason,
            performed_by=request.performed_by,
            from_section_id=request.from_section_id,
            to_section_id=request.to_section_id,
            reference_id=request.reference_id,
        )


class ListStockMovementsUseCase(LedgerUseCase):
    failure_data: list = []

    async def execute(self, query: MovementQuery | None = None) -> list[StockMovement]:
        query = query or MovementQuery()
        store = await self._get_store()
        return await store.list_movements(
            stock_entry_id=query.stock_entry_id,
            movement_type=query.type,
            from_date=query.from_date,
            to_date=query.to_date,
            section_id=query.section_id,
            raw_material_id=query.raw_material_id,
        )


class TransferStockUseCase(LedgerUseCase):
    """Move stock into a section, from central stock or another section."""

    failure_data = False

    async def execute(self, request: TransferStockRequest) -> StockMovement:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.transfer(
            stock_entry_id=request.stock_entry_id,
            from_section_id=request.from_section_id,
            to_section_id=request.to_section_id,
            quantity=request.quantity,
            performed_by=request.performed_by,
            reason=request.reason,
        )

    def present(self, result: StockMovement) -> bool:
        return True
