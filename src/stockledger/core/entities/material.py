"""
Raw material domain entity.

A raw material is anything the kitchen buys and consumes. Quantities in the
ledger are kept in the material's base unit; see
``stockledger.core.services.unit_conversion``.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class MaterialCategory(str, Enum):
    """Raw material categories."""

    MEAT = "meat"
    VEGETABLES = "vegetables"
    DAIRY = "dairy"
    BEVERAGES = "beverages"
    CONDIMENTS = "condiments"
    GRAINS = "grains"
    SPICES = "spices"
    PACKAGING = "packaging"
    OTHER = "other"


class MeasurementUnit(str, Enum):
    """Declared units of measure."""

    KG = "kg"
    GRAMS = "grams"
    LITERS = "liters"
    ML = "ml"
    PIECES = "pieces"
    PACKS = "packs"
    BOXES = "boxes"
    BOTTLES = "bottles"


PACK_UNITS = frozenset({MeasurementUnit.PACKS, MeasurementUnit.BOXES})


class RawMaterial(BaseModel):
    """
    A raw material in the catalog.

    ``unit_cost`` is the price of one declared unit (one pack for pack and
    box materials). ``units_per_pack`` and ``base_unit`` only matter when the
    unit is PACKS or BOXES.
    """

    id: str | None = None
    name: str
    description: str | None = None
    category: MaterialCategory = MaterialCategory.OTHER
    unit: MeasurementUnit
    unit_cost: float
    supplier: str | None = None
    min_stock_level: float = 0.0
    max_stock_level: float
    is_active: bool = True
    units_per_pack: float | None = None
    base_unit: MeasurementUnit | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def check_levels_and_cost(self) -> "RawMaterial":
        """Enforce cost and threshold invariants."""
        if self.unit_cost <= 0:
            raise ValueError("unit_cost must be greater than 0")
        if self.min_stock_level < 0:
            raise ValueError("min_stock_level cannot be negative")
        if self.max_stock_level <= self.min_stock_level:
            raise ValueError("max_stock_level must be greater than min_stock_level")
        return self

    @property
    def is_pack_unit(self) -> bool:
        return self.unit in PACK_UNITS
