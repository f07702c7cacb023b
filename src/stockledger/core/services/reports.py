"""
Report builders.

Pure reducers over ledger data: consumption, purchase expenses, low stock
and inventory value. They take already-loaded entities and never touch the
store.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import BaseModel, Field, computed_field

from stockledger.core.entities.material import RawMaterial
from stockledger.core.entities.stock import (
    WASTE_TYPES,
    StockEntry,
    StockLevel,
    StockMovement,
)
from stockledger.core.services.unit_conversion import cost_per_base_unit


class ReasonBreakdown(BaseModel):
    reason: str
    count: int = 0
    quantity: float = 0.0
    value: float = 0.0


class MaterialConsumption(BaseModel):
    raw_material_id: str
    name: str
    category: str | None = None
    quantity: float = 0.0
    value: float = 0.0
    movement_count: int = 0


class ConsumptionReport(BaseModel):
    """Consumption (OUT, EXPIRED, DAMAGED) over a set of movements."""

    section_id: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    movement_count: int = 0
    total_quantity: float = 0.0
    total_value: float = 0.0
    waste_quantity: float = 0.0
    waste_value: float = 0.0
    by_reason: list[ReasonBreakdown] = Field(default_factory=list)
    top_materials: list[MaterialConsumption] = Field(default_factory=list)
    by_category: dict[str, float] = Field(default_factory=dict)


class MaterialExpense(BaseModel):
    raw_material_id: str
    name: str
    category: str | None = None
    total_cost: float = 0.0
    total_quantity: float = 0.0
    average_unit_cost: float = 0.0
    purchase_count: int = 0
    last_purchase_date: datetime | None = None


class SupplierExpense(BaseModel):
    supplier: str
    total_spent: float = 0.0
    entry_count: int = 0


class ExpenseReport(BaseModel):
    """Purchase spending derived from stock entries."""

    entry_count: int = 0
    total_purchases: float = 0.0
    average_order_value: float = 0.0
    top_materials: list[MaterialExpense] = Field(default_factory=list)
    suppliers: list[SupplierExpense] = Field(default_factory=list)


class LowStockItem(BaseModel):
    raw_material_id: str
    name: str
    available_quantity: float
    min_level: float
    max_level: float
    reorder_quantity: float
    estimated_cost: float


class LowStockReport(BaseModel):
    critical: list[LowStockItem] = Field(default_factory=list)
    warning: list[LowStockItem] = Field(default_factory=list)
    low: list[LowStockItem] = Field(default_factory=list)
    estimated_restock_cost: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return len(self.critical) + len(self.warning) + len(self.low)


def _utc(moment: datetime | None) -> datetime | None:
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _in_window(moment: datetime, from_date: datetime | None, to_date: datetime | None) -> bool:
    """Naive datetimes on either side count as UTC."""
    moment, from_date, to_date = _utc(moment), _utc(from_date), _utc(to_date)
    if from_date is not None and moment < from_date:
        return False
    if to_date is not None and moment > to_date:
        return False
    return True


def build_consumption_report(
    movements: Iterable[StockMovement],
    entries: Iterable[StockEntry],
    materials: Iterable[RawMaterial],
    section_id: str | None = None,
    top_n: int = 10,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
) -> ConsumptionReport:
    """
    Summarise consuming movements.

    Each movement is valued at the unit cost of the entry it draws from.
    With ``section_id`` only movements leaving that section are counted.
    """
    entries_by_id = {e.id: e for e in entries}
    materials_by_id = {m.id: m for m in materials}

    report = ConsumptionReport(section_id=section_id, from_date=from_date, to_date=to_date)
    reasons: dict[str, ReasonBreakdown] = {}
    per_material: dict[str, MaterialConsumption] = {}
    per_category: dict[str, float] = defaultdict(float)

    for movement in movements:
        if not movement.is_consuming:
            continue
        if section_id is not None and movement.from_section_id != section_id:
            continue
        if not _in_window(movement.created_at, from_date, to_date):
            continue

        entry = entries_by_id.get(movement.stock_entry_id)
        if entry is None:
            continue
        material = materials_by_id.get(entry.raw_material_id)
        value = movement.quantity * entry.unit_cost

        report.movement_count += 1
        report.total_quantity += movement.quantity
        report.total_value += value
        if movement.type in WASTE_TYPES:
            report.waste_quantity += movement.quantity
            report.waste_value += value

        bucket = reasons.setdefault(movement.reason, ReasonBreakdown(reason=movement.reason))
        bucket.count += 1
        bucket.quantity += movement.quantity
        bucket.value += value

        item = per_material.get(entry.raw_material_id)
        if item is None:
            item = MaterialConsumption(
                raw_material_id=entry.raw_material_id,
                name=material.name if material else entry.raw_material_id,
                category=material.category.value if material else None,
            )
            per_material[entry.raw_material_id] = item
        item.quantity += movement.quantity
        item.value += value
        item.movement_count += 1

        per_category[item.category or "other"] += value

    report.by_reason = sorted(reasons.values(), key=lambda r: r.value, reverse=True)
    report.top_materials = sorted(per_material.values(), key=lambda m: m.value, reverse=True)[:top_n]
    report.by_category = dict(per_category)
    return report


def consumption_by_category(
    movements: Iterable[StockMovement],
    entries: Iterable[StockEntry],
    materials: Iterable[RawMaterial],
) -> dict[str, float]:
    """Consumed value per material category."""
    return build_consumption_report(movements, entries, materials, top_n=0).by_category


def build_expense_report(
    entries: Iterable[StockEntry],
    materials: Iterable[RawMaterial],
    top_n: int = 15,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
) -> ExpenseReport:
    """Purchase totals, per-material cost analysis and supplier ranking."""
    materials_by_id = {m.id: m for m in materials}

    report = ExpenseReport()
    per_material: dict[str, MaterialExpense] = {}
    per_supplier: dict[str, SupplierExpense] = {}

    for entry in entries:
        if not _in_window(entry.received_date, from_date, to_date):
            continue

        report.entry_count += 1
        report.total_purchases += entry.total_cost

        item = per_material.get(entry.raw_material_id)
        if item is None:
            material = materials_by_id.get(entry.raw_material_id)
            item = MaterialExpense(
                raw_material_id=entry.raw_material_id,
                name=material.name if material else entry.raw_material_id,
                category=material.category.value if material else None,
            )
            per_material[entry.raw_material_id] = item
        item.total_cost += entry.total_cost
        item.total_quantity += entry.quantity
        item.purchase_count += 1
        if item.last_purchase_date is None or entry.received_date > item.last_purchase_date:
            item.last_purchase_date = entry.received_date

        if entry.supplier:
            supplier = per_supplier.setdefault(entry.supplier, SupplierExpense(supplier=entry.supplier))
            supplier.total_spent += entry.total_cost
            supplier.entry_count += 1

    for item in per_material.values():
        if item.total_quantity > 0:
            item.average_unit_cost = item.total_cost / item.total_quantity

    if report.entry_count:
        report.average_order_value = report.total_purchases / report.entry_count
    report.top_materials = sorted(per_material.values(), key=lambda m: m.total_cost, reverse=True)[:top_n]
    report.suppliers = sorted(per_supplier.values(), key=lambda s: s.total_spent, reverse=True)
    return report


def _level_unit_cost(level: StockLevel) -> float:
    if level.raw_material is None:
        return 0.0
    return cost_per_base_unit(level.raw_material.unit_cost, level.raw_material)


def build_low_stock_report(levels: Iterable[StockLevel], warning_ratio: float = 0.5) -> LowStockReport:
    """
    Bucket low-stock materials by severity.

    critical: nothing available; warning: at or below ``warning_ratio`` of
    the minimum; low: anything else flagged low stock.
    """
    report = LowStockReport()

    for level in levels:
        if not level.is_low_stock:
            continue

        reorder = max(level.max_level - level.available_quantity, 0.0)
        cost = reorder * _level_unit_cost(level)
        item = LowStockItem(
            raw_material_id=level.raw_material_id,
            name=level.raw_material.name if level.raw_material else level.raw_material_id,
            available_quantity=level.available_quantity,
            min_level=level.min_level,
            max_level=level.max_level,
            reorder_quantity=reorder,
            estimated_cost=cost,
        )
        report.estimated_restock_cost += cost

        if level.available_quantity <= 0:
            report.critical.append(item)
        elif level.available_quantity <= level.min_level * warning_ratio:
            report.warning.append(item)
        else:
            report.low.append(item)

    return report


def value_by_category(levels: Iterable[StockLevel]) -> dict[str, float]:
    """Value of available stock per material category."""
    values: dict[str, float] = defaultdict(float)
    for level in levels:
        if level.raw_material is None:
            continue
        values[level.raw_material.category.value] += max(level.available_quantity, 0.0) * _level_unit_cost(level)
    return dict(values)


def total_inventory_value(levels: Iterable[StockLevel]) -> float:
    return sum(value_by_category(levels).values())
