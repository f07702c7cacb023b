"""Stock entry use cases: receipts and corrective edits."""

from stockledger.application.dto.requests import (
    CreateStockEntryRequest,
    EntryQuery,
    UpdateStockEntryRequest,
)
from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.config import get_logger
from stockledger.core.entities.stock import StockEntry
from stockledger.core.exceptions import StockEntryNotFoundError
from stockledger.core.services.movement_recorder import MovementRecorder

logger = get_logger(__name__)


class CreateStockEntryUseCase(LedgerUseCase):
    """Receive stock: a new entry plus its IN movement."""

    async def execute(self, request: CreateStockEntryRequest) -> StockEntry:
        logger.info(
            "receive_stock_started",
            material_id=request.raw_material_id,
            quantity=request.quantity,
        )
        recorder = MovementRecorder(await self._get_store())
        entry, _ = await recorder.record_receipt(
            raw_material_id=request.raw_material_id,
            quantity=request.quantity,
            unit_cost=request.unit_cost,
            received_date=request.received_date,
            received_by=request.received_by,
            supplier=request.supplier,
            batch_number=request.batch_number,
            expiry_date=request.expiry_date,
            notes=request.notes,
        )
        return entry


class ListStockEntriesUseCase(LedgerUseCase):
    failure_data: list = []

    async def execute(self, query: EntryQuery | None = None) -> list[StockEntry]:
        query = query or EntryQuery()
        store = await self._get_store()
        return await store.list_entries(
            raw_material_id=query.raw_material_id,
            supplier=query.supplier,
            from_date=query.from_date,
            to_date=query.to_date,
        )


class GetStockEntryUseCase(LedgerUseCase):
    async def execute(self, entry_id: str) -> StockEntry:
        entry = await (await self._get_store()).get_entry(entry_id)
        if entry is None:
            raise StockEntryNotFoundError(entry_id)
        return entry


class UpdateStockEntryUseCase(LedgerUseCase):
    """Corrective edit of an entry; total cost is recomputed."""

    async def execute(self, entry_id: str, request: UpdateStockEntryRequest) -> StockEntry:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.update_entry(entry_id, request.changes(), request.updated_by)


class DeleteStockEntryUseCase(LedgerUseCase):
    """Delete an entry that no movement other than its own IN depends on."""

    failure_data = False

    async def execute(self, entry_id: str) -> bool:
        return await MovementRecorder(await self._get_store()).delete_entry(entry_id)
