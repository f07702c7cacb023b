"""
Dependency injection for FastAPI.

Routes receive use cases built on the ledger store. Tests replace
``get_ledger_store`` through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends, Response

from stockledger.api.middleware.error_handler import status_for_error_code
from stockledger.application.dto.responses import OperationResult
from stockledger.application.use_cases import (
    AssignStockToSectionUseCase,
    ConsumptionReportUseCase,
    CreateMaterialUseCase,
    CreateSectionUseCase,
    CreateStockEntryUseCase,
    CreateStockMovementUseCase,
    DeactivateMaterialUseCase,
    DeactivateSectionUseCase,
    DeleteStockEntryUseCase,
    ExpenseReportUseCase,
    GetCurrentStockLevelsUseCase,
    GetEntryBalancesUseCase,
    GetMaterialUseCase,
    GetSectionInventoryUseCase,
    GetSectionUseCase,
    GetStockEntryUseCase,
    GetStockLevelUseCase,
    InventoryValueUseCase,
    ListMaterialsUseCase,
    ListSectionConsumptionUseCase,
    ListSectionsUseCase,
    ListStockEntriesUseCase,
    ListStockMovementsUseCase,
    LowStockReportUseCase,
    RecordConsumptionUseCase,
    RemoveSectionInventoryUseCase,
    TransferStockUseCase,
    UpdateMaterialUseCase,
    UpdateSectionInventoryUseCase,
    UpdateSectionUseCase,
    UpdateStockEntryUseCase,
)
from stockledger.config import Settings, get_settings
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.infrastructure.storage.sqlite import create_ledger_store


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


async def get_ledger_store() -> ILedgerStore:
    """Ledger store on the global connection pool."""
    return await create_ledger_store()


def envelope(result: OperationResult, response: Response, success_status: int = 200) -> OperationResult:
    """Set the HTTP status from the envelope and pass it through."""
    response.status_code = success_status if result.success else status_for_error_code(result.error_code)
    return result


# Materials
def get_create_material_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> CreateMaterialUseCase:
    return CreateMaterialUseCase(store)


def get_list_materials_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> ListMaterialsUseCase:
    return ListMaterialsUseCase(store)


def get_material_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> GetMaterialUseCase:
    return GetMaterialUseCase(store)


def get_update_material_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> UpdateMaterialUseCase:
    return UpdateMaterialUseCase(store)


def get_deactivate_material_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> DeactivateMaterialUseCase:
    return DeactivateMaterialUseCase(store)


# Stock levels
def get_stock_levels_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> GetCurrentStockLevelsUseCase:
    return GetCurrentStockLevelsUseCase(store)


def get_stock_level_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> GetStockLevelUseCase:
    return GetStockLevelUseCase(store)


def get_entry_balances_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> GetEntryBalancesUseCase:
    return GetEntryBalancesUseCase(store)


# Stock entries
def get_create_entry_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> CreateStockEntryUseCase:
    return CreateStockEntryUseCase(store)


def get_list_entries_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> ListStockEntriesUseCase:
    return ListStockEntriesUseCase(store)


def get_entry_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> GetStockEntryUseCase:
    return GetStockEntryUseCase(store)


def get_update_entry_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> UpdateStockEntryUseCase:
    return UpdateStockEntryUseCase(store)


def get_delete_entry_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> DeleteStockEntryUseCase:
    return DeleteStockEntryUseCase(store)


# Movements
def get_create_movement_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> CreateStockMovementUseCase:
    return CreateStockMovementUseCase(store)


def get_list_movements_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> ListStockMovementsUseCase:
    return ListStockMovementsUseCase(store)


def get_transfer_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> TransferStockUseCase:
    return TransferStockUseCase(store)


# Sections
def get_create_section_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> CreateSectionUseCase:
    return CreateSectionUseCase(store)


def get_list_sections_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> ListSectionsUseCase:
    return ListSectionsUseCase(store)


def get_section_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> GetSectionUseCase:
    return GetSectionUseCase(store)


def get_update_section_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> UpdateSectionUseCase:
    return UpdateSectionUseCase(store)


def get_deactivate_section_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> DeactivateSectionUseCase:
    return DeactivateSectionUseCase(store)


def get_assign_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> AssignStockToSectionUseCase:
    return AssignStockToSectionUseCase(store)


def get_consumption_use_case(store: ILedgerStore = Depends(get_ledger_store)) -> RecordConsumptionUseCase:
    return RecordConsumptionUseCase(store)


def get_section_inventory_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> GetSectionInventoryUseCase:
    return GetSectionInventoryUseCase(store)


def get_update_section_inventory_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> UpdateSectionInventoryUseCase:
    return UpdateSectionInventoryUseCase(store)


def get_remove_section_inventory_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> RemoveSectionInventoryUseCase:
    return RemoveSectionInventoryUseCase(store)


def get_list_consumption_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
) -> ListSectionConsumptionUseCase:
    return ListSectionConsumptionUseCase(store)


# Reports
def get_consumption_report_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
    settings: Settings = Depends(get_app_settings),
) -> ConsumptionReportUseCase:
    return ConsumptionReportUseCase(store, settings.inventory)


def get_expense_report_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
    settings: Settings = Depends(get_app_settings),
) -> ExpenseReportUseCase:
    return ExpenseReportUseCase(store, settings.inventory)


def get_low_stock_report_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
    settings: Settings = Depends(get_app_settings),
) -> LowStockReportUseCase:
    return LowStockReportUseCase(store, settings.inventory)


def get_inventory_value_use_case(
    store: ILedgerStore = Depends(get_ledger_store),
    settings: Settings = Depends(get_app_settings),
) -> InventoryValueUseCase:
    return InventoryValueUseCase(store, settings.inventory)
