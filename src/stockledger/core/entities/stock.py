"""Stock ledger entities: entries, movements and derived stock levels."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from stockledger.core.entities.material import RawMaterial


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "in"  # stock received
    OUT = "out"  # used/consumed
    TRANSFER = "transfer"  # between sections
    ADJUSTMENT = "adjustment"  # manual correction, recorded only
    EXPIRED = "expired"
    DAMAGED = "damaged"


CONSUMING_TYPES = frozenset({MovementType.OUT, MovementType.EXPIRED, MovementType.DAMAGED})
WASTE_TYPES = frozenset({MovementType.EXPIRED, MovementType.DAMAGED})


class StockEntry(BaseModel):
    """
    One physical receipt of a material.

    ``quantity`` is in base units and ``unit_cost`` is per base unit, so
    ``total_cost`` is always ``quantity * unit_cost``.
    """

    id: str | None = None
    raw_material_id: str
    quantity: float = Field(..., ge=0)
    unit_cost: float = Field(..., ge=0)
    total_cost: float = 0.0
    supplier: str | None = None
    batch_number: str | None = None
    expiry_date: date | None = None
    received_date: datetime
    received_by: str
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def compute_total_cost(self) -> "StockEntry":
        """Keep total_cost in step with quantity and unit_cost."""
        self.total_cost = self.quantity * self.unit_cost
        return self

    def recompute_total(self) -> None:
        self.total_cost = self.quantity * self.unit_cost


class StockMovement(BaseModel):
    """A signed event against a stock entry. Direction comes from ``type``."""

    id: str | None = None
    stock_entry_id: str
    type: MovementType
    quantity: float = Field(..., ge=0)  # magnitude, base units
    from_section_id: str | None = None
    to_section_id: str | None = None
    reason: str
    performed_by: str
    reference_id: str | None = None  # order id, assignment id, etc.
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_consuming(self) -> bool:
        return self.type in CONSUMING_TYPES


class StockLevel(BaseModel):
    """
    Derived per-material snapshot. Never persisted.

    ``last_updated`` is the time the snapshot was computed; the time of the
    latest ledger write for the material is ``last_movement_at``.
    """

    raw_material_id: str
    raw_material: RawMaterial | None = None
    total_quantity: float
    available_quantity: float
    reserved_quantity: float = 0.0
    allocated_quantity: float = 0.0
    min_level: float
    max_level: float
    is_low_stock: bool
    total_units_quantity: float
    available_units_quantity: float
    last_updated: datetime
    last_movement_at: datetime | None = None
    integrity_warning: str | None = None
