"""Core domain entities."""

from stockledger.core.entities.material import (
    PACK_UNITS,
    MaterialCategory,
    MeasurementUnit,
    RawMaterial,
)
from stockledger.core.entities.section import (
    ConsumptionSource,
    Section,
    SectionConsumption,
    SectionInventory,
    SectionStockLevel,
    SectionType,
)
from stockledger.core.entities.stock import (
    CONSUMING_TYPES,
    WASTE_TYPES,
    MovementType,
    StockEntry,
    StockLevel,
    StockMovement,
)

__all__ = [
    # Materials
    "RawMaterial",
    "MaterialCategory",
    "MeasurementUnit",
    "PACK_UNITS",
    # Ledger
    "StockEntry",
    "StockMovement",
    "MovementType",
    "StockLevel",
    "CONSUMING_TYPES",
    "WASTE_TYPES",
    # Sections
    "Section",
    "SectionType",
    "SectionInventory",
    "SectionConsumption",
    "SectionStockLevel",
    "ConsumptionSource",
]
