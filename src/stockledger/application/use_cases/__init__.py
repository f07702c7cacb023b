"""Application use cases."""

from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.application.use_cases.materials import (
    CreateMaterialUseCase,
    DeactivateMaterialUseCase,
    GetMaterialUseCase,
    ListMaterialsUseCase,
    UpdateMaterialUseCase,
)
from stockledger.application.use_cases.reports import (
    ConsumptionReportUseCase,
    ExpenseReportUseCase,
    InventoryValueUseCase,
    LowStockReportUseCase,
)
from stockledger.application.use_cases.sections import (
    AssignStockToSectionUseCase,
    CreateSectionUseCase,
    DeactivateSectionUseCase,
    GetSectionInventoryUseCase,
    GetSectionUseCase,
    ListSectionConsumptionUseCase,
    ListSectionsUseCase,
    RecordConsumptionUseCase,
    RemoveSectionInventoryUseCase,
    UpdateSectionInventoryUseCase,
    UpdateSectionUseCase,
)
from stockledger.application.use_cases.stock_entries import (
    CreateStockEntryUseCase,
    DeleteStockEntryUseCase,
    GetStockEntryUseCase,
    ListStockEntriesUseCase,
    UpdateStockEntryUseCase,
)
from stockledger.application.use_cases.stock_levels import (
    GetCurrentStockLevelsUseCase,
    GetEntryBalancesUseCase,
    GetStockLevelUseCase,
)
from stockledger.application.use_cases.stock_movements import (
    CreateStockMovementUseCase,
    ListStockMovementsUseCase,
    TransferStockUseCase,
)

__all__ = [
    "LedgerUseCase",
    # Stock levels
    "GetCurrentStockLevelsUseCase",
    "GetStockLevelUseCase",
    "GetEntryBalancesUseCase",
    # Entries
    "CreateStockEntryUseCase",
    "ListStockEntriesUseCase",
    "GetStockEntryUseCase",
    "UpdateStockEntryUseCase",
    "DeleteStockEntryUseCase",
    # Movements
    "CreateStockMovementUseCase",
    "ListStockMovementsUseCase",
    "TransferStockUseCase",
    # Materials
    "CreateMaterialUseCase",
    "ListMaterialsUseCase",
    "GetMaterialUseCase",
    "UpdateMaterialUseCase",
    "DeactivateMaterialUseCase",
    # Sections
    "CreateSectionUseCase",
    "ListSectionsUseCase",
    "GetSectionUseCase",
    "UpdateSectionUseCase",
    "DeactivateSectionUseCase",
    "AssignStockToSectionUseCase",
    "RecordConsumptionUseCase",
    "GetSectionInventoryUseCase",
    "UpdateSectionInventoryUseCase",
    "RemoveSectionInventoryUseCase",
    "ListSectionConsumptionUseCase",
    # Reports
    "ConsumptionReportUseCase",
    "ExpenseReportUseCase",
    "LowStockReportUseCase",
    "InventoryValueUseCase",
]
