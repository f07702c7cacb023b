"""Request DTOs for the ledger commands and queries.

Pydantic v2 models validated before any use case runs. Quantities and unit
costs are in the material's declared unit (packs for pack materials).
"""

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from stockledger.core.entities.material import MaterialCategory, MeasurementUnit
from stockledger.core.entities.section import ConsumptionSource, SectionType
from stockledger.core.entities.stock import MovementType

# --- Raw materials ---


class CreateMaterialRequest(BaseModel):
    """Request to add a raw material to the catalog."""

    name: str = Field(..., min_length=1, max_length=200, description="Material name")
    description: str | None = Field(default=None, description="Free-text description")
    category: MaterialCategory = Field(default=MaterialCategory.OTHER, description="Material category")
    unit: MeasurementUnit = Field(..., description="Declared unit of measure")
    unit_cost: float = Field(..., gt=0, description="Price of one declared unit")
    supplier: str | None = Field(default=None, description="Default supplier")
    min_stock_level: float = Field(default=0.0, ge=0, description="Low-stock threshold (base units)")
    max_stock_level: float = Field(..., gt=0, description="Maximum stock level (base units)")
    units_per_pack: float | None = Field(
        default=None, gt=0, description="Base units in one pack (PACKS/BOXES only)"
    )
    base_unit: MeasurementUnit | None = Field(
        default=None, description="Unit inside a pack (PACKS/BOXES only)"
    )

    @model_validator(mode="after")
    def check_levels(self) -> "CreateMaterialRequest":
        if self.max_stock_level <= self.min_stock_level:
            raise ValueError("max_stock_level must be greater than min_stock_level")
        return self


class UpdateMaterialRequest(BaseModel):
    """Partial update of a raw material. Only the fields that are set change."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: MaterialCategory | None = None
    unit: MeasurementUnit | None = None
    unit_cost: float | None = Field(default=None, gt=0)
    supplier: str | None = None
    min_stock_level: float | None = Field(default=None, ge=0)
    max_stock_level: float | None = Field(default=None, gt=0)
    is_active: bool | None = None
    units_per_pack: float | None = Field(default=None, gt=0)
    base_unit: MeasurementUnit | None = None


# --- Stock entries ---


class CreateStockEntryRequest(BaseModel):
    """Request to record a stock receipt."""

    raw_material_id: str = Field(..., min_length=1, description="Material received")
    quantity: float = Field(..., gt=0, description="Quantity in the declared unit")
    unit_cost: float = Field(..., gt=0, description="Price of one declared unit")
    received_date: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the stock arrived"
    )
    received_by: str = Field(..., min_length=1, description="Who received the stock")
    supplier: str | None = Field(default=None, description="Supplier (defaults to the material's)")
    batch_number: str | None = Field(default=None, description="Supplier batch or lot number")
    expiry_date: date | None = Field(default=None, description="Best-before date")
    notes: str | None = Field(default=None, max_length=1000)


class UpdateStockEntryRequest(BaseModel):
    """Corrective edit of a stock entry. Only the fields that are set change."""

    raw_material_id: str | None = Field(default=None, min_length=1)
    quantity: float | None = Field(default=None, gt=0)
    unit_cost: float | None = Field(default=None, gt=0)
    supplier: str | None = None
    batch_number: str | None = None
    expiry_date: date | None = None
    received_date: datetime | None = None
    received_by: str | None = Field(default=None, min_length=1)
    notes: str | None = Field(default=None, max_length=1000)
    updated_by: str = Field(default="system", min_length=1, description="Who made the correction")

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"updated_by"})


# --- Movements ---


class CreateStockMovementRequest(BaseModel):
    """Request to append a movement against a stock entry."""

    stock_entry_id: str = Field(..., min_length=1)
    type: MovementType = Field(..., description="Movement type (IN is recorded via stock entries)")
    quantity: float = Field(..., gt=0, description="Quantity in the declared unit")
    from_section_id: str | None = None
    to_section_id: str | None = None
    reason: str = Field(..., min_length=1, max_length=500)
    performed_by: str = Field(..., min_length=1)
    reference_id: str | None = Field(default=None, description="Order or document reference")

    @model_validator(mode="after")
    def check_type_fields(self) -> "CreateStockMovementRequest":
        if self.type == MovementType.TRANSFER and not self.to_section_id:
            raise ValueError("to_section_id is required for transfer movements")
        if self.from_section_id and self.from_section_id == self.to_section_id:
            raise ValueError("from_section_id and to_section_id must differ")
        return self


class TransferStockRequest(BaseModel):
    """Request to move stock into a section."""

    stock_entry_id: str = Field(..., min_length=1)
    from_section_id: str | None = Field(
        default=None, description="Source section; omit to allocate from central stock"
    )
    to_section_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0, description="Quantity in the declared unit")
    performed_by: str = Field(..., min_length=1)
    reason: str = Field(default="Stock transfer", min_length=1, max_length=500)


# --- Sections ---


class CreateSectionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    type: SectionType = SectionType.OTHER
    manager_id: str | None = None


class UpdateSectionRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    type: SectionType | None = None
    manager_id: str | None = None
    is_active: bool | None = None


class AssignStockBody(BaseModel):
    """Body of an assignment; the section comes from the URL."""

    raw_material_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0, description="Quantity in the declared unit")
    assigned_by: str = Field(..., min_length=1)
    notes: str | None = Field(default=None, max_length=500)


class AssignStockRequest(AssignStockBody):
    """Request to allocate central stock to a section."""

    section_id: str = Field(..., min_length=1)


class RecordConsumptionBody(BaseModel):
    """Body of a consumption; the section comes from the URL."""

    raw_material_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0, description="Quantity in the declared unit")
    consumed_by: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=500)
    order_id: str | None = None
    notes: str | None = Field(default=None, max_length=1000)
    source: ConsumptionSource = ConsumptionSource.MANUAL
    movement_type: MovementType = Field(
        default=MovementType.OUT, description="out, expired or damaged"
    )

    @model_validator(mode="after")
    def check_movement_type(self) -> "RecordConsumptionBody":
        if self.movement_type not in (MovementType.OUT, MovementType.EXPIRED, MovementType.DAMAGED):
            raise ValueError("movement_type must be out, expired or damaged")
        return self


class RecordConsumptionRequest(RecordConsumptionBody):
    """Request to record stock used up in a section."""

    section_id: str = Field(..., min_length=1)


class UpdateSectionInventoryRequest(BaseModel):
    """Set a section allocation to a new quantity."""

    quantity: float = Field(..., ge=0, description="New quantity in the declared unit")
    updated_by: str = Field(..., min_length=1)
    notes: str | None = Field(default=None, max_length=500)


class RemoveSectionInventoryRequest(BaseModel):
    removed_by: str = Field(..., min_length=1)
    notes: str | None = Field(default=None, max_length=500)


# --- Queries ---


class MovementQuery(BaseModel):
    """Filters for listing movements."""

    stock_entry_id: str | None = None
    type: MovementType | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    section_id: str | None = None
    raw_material_id: str | None = None


class EntryQuery(BaseModel):
    """Filters for listing stock entries."""

    raw_material_id: str | None = None
    supplier: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None


class ConsumptionQuery(BaseModel):
    """Filters for listing section consumption."""

    section_id: str | None = None
    raw_material_id: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    source: ConsumptionSource | None = None


class ReportQuery(BaseModel):
    """Window and scope for reports. Empty dates use the configured window."""

    from_date: datetime | None = None
    to_date: datetime | None = None
    section_id: str | None = None
    top_n: int | None = Field(default=None, ge=1, le=100)

    @field_validator("from_date", "to_date")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        """Naive datetimes are taken as UTC, the way the store keeps them."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
