"""Section use cases: catalog, allocation and consumption."""

from stockledger.application.dto.requests import (
    AssignStockRequest,
    ConsumptionQuery,
    CreateSectionRequest,
    RecordConsumptionRequest,
    RemoveSectionInventoryRequest,
    UpdateSectionInventoryRequest,
    UpdateSectionRequest,
)
from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.config import get_logger
from stockledger.core.entities.section import (
    Section,
    SectionConsumption,
    SectionInventory,
    SectionStockLevel,
    SectionType,
)
from stockledger.core.exceptions import SectionNotFoundError
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.core.services.movement_recorder import MovementRecorder
from stockledger.core.services.stock_aggregator import StockLevelAggregator

logger = get_logger(__name__)


async def _require_section(store: ILedgerStore, section_id: str) -> Section:
    section = await store.get_section(section_id)
    if section is None:
        raise SectionNotFoundError(section_id)
    return section


class CreateSectionUseCase(LedgerUseCase):
    async def execute(self, request: CreateSectionRequest) -> Section:
        return await (await self._get_store()).create_section(Section(**request.model_dump()))


class ListSectionsUseCase(LedgerUseCase):
    failure_data: list = []

    async def execute(
        self,
        section_type: SectionType | None = None,
        is_active: bool | None = None,
        manager_id: str | None = None,
        search: str | None = None,
    ) -> list[Section]:
        store = await self._get_store()
        return await store.list_sections(
            section_type=section_type,
            is_active=is_active,
            manager_id=manager_id,
            search=search,
        )


class GetSectionUseCase(LedgerUseCase):
    async def execute(self, section_id: str) -> Section:
        return await _require_section(await self._get_store(), section_id)


class UpdateSectionUseCase(LedgerUseCase):
    async def execute(self, section_id: str, request: UpdateSectionRequest) -> Section:
        store = await self._get_store()
        section = await _require_section(store, section_id)
        updated = section.model_copy(update=request.model_dump(exclude_unset=True))
        return await store.update_section(Section.model_validate(updated.model_dump()))


class DeactivateSectionUseCase(LedgerUseCase):
    """Soft delete. Stock still allocated to the section stays on its rows."""

    failure_data = False

    async def execute(self, section_id: str) -> bool:
        store = await self._get_store()
        section = await _require_section(store, section_id)
        if section.is_active:
            section.is_active = False
            await store.update_section(section)
            logger.info("section_deactivated", section_id=section_id)
        return True


class AssignStockToSectionUseCase(LedgerUseCase):
    """Allocate central stock to a section."""

    failure_data = False

    async def execute(self, request: AssignStockRequest) -> SectionInventory:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.assign_to_section(
            section_id=request.section_id,
            raw_material_id=request.raw_material_id,
            quantity=request.quantity,
            assigned_by=request.assigned_by,
            notes=request.notes,
        )

    def present(self, result: SectionInventory) -> bool:
        return True


class RecordConsumptionUseCase(LedgerUseCase):
    """Record stock used up in a section."""

    failure_data = False

    async def execute(self, request: RecordConsumptionRequest) -> SectionConsumption:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.consume_from_section(
            section_id=request.section_id,
            raw_material_id=request.raw_material_id,
            quantity=request.quantity,
            consumed_by=request.consumed_by,
            reason=request.reason,
            order_id=request.order_id,
            notes=request.notes,
            source=request.source,
            movement_type=request.movement_type,
        )

    def present(self, result: SectionConsumption) -> bool:
        return True


class GetSectionInventoryUseCase(LedgerUseCase):
    """Section-mode stock levels: one per material held by the section."""

    failure_data: list = []

    async def execute(self, section_id: str) -> list[SectionStockLevel]:
        store = await self._get_store()
        await _require_section(store, section_id)
        return await StockLevelAggregator(store).section_levels(section_id)


class UpdateSectionInventoryUseCase(LedgerUseCase):
    async def execute(
        self, inventory_id: str, request: UpdateSectionInventoryRequest
    ) -> SectionInventory:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.update_section_inventory(
            inventory_id,
            quantity=request.quantity,
            updated_by=request.updated_by,
            notes=request.notes,
        )


class RemoveSectionInventoryUseCase(LedgerUseCase):
    failure_data = False

    async def execute(self, inventory_id: str, request: RemoveSectionInventoryRequest) -> bool:
        recorder = MovementRecorder(await self._get_store())
        return await recorder.remove_section_inventory(
            inventory_id, removed_by=request.removed_by, notes=request.notes
        )


class ListSectionConsumptionUseCase(LedgerUseCase):
    failure_data: list = []

    async def execute(self, query: ConsumptionQuery | None = None) -> list[SectionConsumption]:
        query = query or ConsumptionQuery()
        store = await self._get_store()
        return await store.list_consumption(
            section_id=query.section_id,
            raw_material_id=query.raw_material_id,
            from_date=query.from_date,
            to_date=query.to_date,
            source=query.source,
        )
