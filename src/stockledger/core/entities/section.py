"""Section entities: physical or logical sub-locations with their own stock."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from stockledger.core.entities.material import RawMaterial


class SectionType(str, Enum):
    """Kinds of sections."""

    KITCHEN = "KITCHEN"
    BAR = "BAR"
    STORAGE = "STORAGE"
    PREPARATION = "PREPARATION"
    RETAIL = "RETAIL"
    OTHER = "OTHER"


class ConsumptionSource(str, Enum):
    """Where a section consumption came from."""

    POS = "POS"
    MANUAL = "MANUAL"
    WASTE = "WASTE"
    OTHER = "OTHER"


class Section(BaseModel):
    """A kitchen, bar, store room or other place that holds allocated stock."""

    id: str | None = None
    name: str
    description: str | None = None
    type: SectionType = SectionType.OTHER
    manager_id: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SectionInventory(BaseModel):
    """
    Quantity of one material allocated to one section.

    A sub-ledger of its own: assignments add to it, consumption takes from
    it, and it never goes below zero.
    """

    id: str | None = None
    section_id: str
    raw_material_id: str
    quantity: float = Field(default=0.0, ge=0)  # base units
    reserved_quantity: float = Field(default=0.0, ge=0)
    min_level: float | None = None
    max_level: float | None = None
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def available_quantity(self) -> float:
        return self.quantity - self.reserved_quantity


class SectionConsumption(BaseModel):
    """A record of stock used up inside a section."""

    id: str | None = None
    section_id: str
    raw_material_id: str
    quantity: float = Field(..., gt=0)  # base units
    unit_cost: float = 0.0  # per base unit
    total_cost: float = 0.0
    consumed_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    consumed_by: str
    reason: str
    order_id: str | None = None
    notes: str | None = None
    source: ConsumptionSource = ConsumptionSource.MANUAL


class SectionStockLevel(BaseModel):
    """Derived view of a section inventory row."""

    inventory_id: str
    section_id: str
    raw_material_id: str
    raw_material: RawMaterial | None = None
    quantity: float
    reserved_quantity: float
    available_quantity: float
    pack_quantity: float
    unit_cost: float
    total_value: float
    min_level: float | None = None
    max_level: float | None = None
    is_low_stock: bool
    last_updated: datetime
