"""
Stock level aggregation.

Folds the append-only ledger (stock entries plus stock movements) into a
per-material snapshot:

    available = sum(entry.quantity) - sum(consuming movements against those entries)

Consuming movements are OUT, EXPIRED and DAMAGED. TRANSFER moves stock
between sections and ADJUSTMENT is informational, so neither changes the
central figure. IN movements mirror their entry and are not counted twice.

Entries are indexed by material and movements by entry before folding, so a
full snapshot is linear in the size of the ledger.
"""

import math
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from stockledger.config import get_logger
from stockledger.core.entities.material import RawMaterial
from stockledger.core.entities.section import SectionInventory, SectionStockLevel
from stockledger.core.entities.stock import StockEntry, StockLevel, StockMovement
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.core.services.unit_conversion import cost_per_base_unit, from_base

logger = get_logger(__name__)


@dataclass
class EntryBalance:
    """Remaining quantity on a single stock entry."""

    entry: StockEntry
    remaining: float


def index_entries_by_material(entries: Iterable[StockEntry]) -> dict[str, list[StockEntry]]:
    index: dict[str, list[StockEntry]] = defaultdict(list)
    for entry in entries:
        index[entry.raw_material_id].append(entry)
    return index


def index_movements_by_entry(
    movements: Iterable[StockMovement],
) -> dict[str, list[StockMovement]]:
    index: dict[str, list[StockMovement]] = defaultdict(list)
    for movement in movements:
        index[movement.stock_entry_id].append(movement)
    return index


def consumed_quantity(movements: Iterable[StockMovement]) -> float:
    """Total of the consuming movements in ``movements``."""
    return sum(m.quantity for m in movements if m.is_consuming)


def entry_balances(
    entries: Iterable[StockEntry],
    movements_by_entry: dict[str, list[StockMovement]],
) -> list[EntryBalance]:
    """Remaining quantity per entry, oldest receipt first."""
    ordered = sorted(entries, key=lambda e: (e.received_date, e.created_at))
    return [
        EntryBalance(
            entry=entry,
            remaining=entry.quantity - consumed_quantity(movements_by_entry.get(entry.id or "", [])),
        )
        for entry in ordered
    ]


def allocate_fifo(balances: Iterable[EntryBalance], quantity: float) -> list[tuple[StockEntry, float]]:
    """
    Split ``quantity`` across entries, oldest first.

    Entries with nothing left are skipped. The result may cover less than
    ``quantity`` when the balances run out; callers check availability first.
    """
    allocations: list[tuple[StockEntry, float]] = []
    outstanding = quantity
    for balance in balances:
        if outstanding <= 0:
            break
        if balance.remaining <= 0:
            continue
        take = min(balance.remaining, outstanding)
        allocations.append((balance.entry, take))
        outstanding -= take
    return allocations


def build_stock_level(
    material: RawMaterial,
    entries: list[StockEntry],
    movements_by_entry: dict[str, list[StockMovement]],
    allocated: float = 0.0,
    now: datetime | None = None,
) -> StockLevel:
    """Fold one material's slice of the ledger into a StockLevel."""
    now = now or datetime.now(UTC)

    total_received = 0.0
    total_used = 0.0
    last_write: datetime | None = None

    for entry in entries:
        total_received += entry.quantity
        last_write = max(last_write, entry.created_at) if last_write else entry.created_at
        for movement in movements_by_entry.get(entry.id or "", []):
            if movement.is_consuming:
                total_used += movement.quantity
            last_write = max(last_write, movement.created_at)

    available = total_received - total_used

    warning = None
    if available < 0:
        warning = (
            f"Available quantity is negative ({available:g}); "
            "consumption exceeds recorded receipts"
        )
        logger.warning(
            "negative_stock_detected",
            material_id=material.id,
            total_received=total_received,
            total_used=total_used,
        )

    return StockLevel(
        raw_material_id=material.id,  # type: ignore[arg-type]
        raw_material=material,
        total_quantity=total_received,
        available_quantity=available,
        reserved_quantity=0.0,
        allocated_quantity=allocated,
        min_level=material.min_stock_level,
        max_level=material.max_stock_level,
        is_low_stock=available <= material.min_stock_level,
        total_units_quantity=from_base(total_received, material),
        available_units_quantity=math.copysign(from_base(abs(available), material), available),
        last_updated=now,
        last_movement_at=last_write,
        integrity_warning=warning,
    )


def build_stock_levels(
    materials: Iterable[RawMaterial],
    entries: Iterable[StockEntry],
    movements: Iterable[StockMovement],
    section_inventory: Iterable[SectionInventory] = (),
    now: datetime | None = None,
) -> list[StockLevel]:
    """Snapshot every given material from one read of the ledger."""
    now = now or datetime.now(UTC)
    entries_by_material = index_entries_by_material(entries)
    movements_by_entry = index_movements_by_entry(movements)

    allocated: dict[str, float] = defaultdict(float)
    for row in section_inventory:
        allocated[row.raw_material_id] += row.quantity

    return [
        build_stock_level(
            material,
            entries_by_material.get(material.id or "", []),
            movements_by_entry,
            allocated=allocated.get(material.id or "", 0.0),
            now=now,
        )
        for material in materials
    ]


def build_section_levels(
    rows: Iterable[SectionInventory],
    materials: dict[str, RawMaterial],
) -> list[SectionStockLevel]:
    """Section-mode snapshot: one level per section inventory row."""
    levels = []
    for row in rows:
        material = materials.get(row.raw_material_id)
        unit_cost = cost_per_base_unit(material.unit_cost, material) if material else 0.0
        pack_quantity = from_base(row.quantity, material) if material else row.quantity
        levels.append(
            SectionStockLevel(
                inventory_id=row.id,  # type: ignore[arg-type]
                section_id=row.section_id,
                raw_material_id=row.raw_material_id,
                raw_material=material,
                quantity=row.quantity,
                reserved_quantity=row.reserved_quantity,
                available_quantity=row.available_quantity,
                pack_quantity=pack_quantity,
                unit_cost=unit_cost,
                total_value=row.quantity * unit_cost,
                min_level=row.min_level,
                max_level=row.max_level,
                is_low_stock=row.min_level is not None and row.quantity <= row.min_level,
                last_updated=row.last_updated,
            )
        )
    return levels


class StockLevelAggregator:
    """
    Computes stock levels from a ledger store.

    Each call reads the ledger once and returns a snapshot consistent with
    that read. Pass a transaction-bound store to see uncommitted writes of
    the same transaction.
    """

    def __init__(self, store: ILedgerStore) -> None:
        self._store = store

    async def current_levels(self) -> list[StockLevel]:
        """Stock levels for every active material."""
        materials = await self._store.list_materials(is_active=True)
        entries = await self._store.list_entries()
        movements = await self._store.list_movements()
        allocations = await self._store.list_section_inventory()

        levels = build_stock_levels(materials, entries, movements, allocations)
        logger.debug(
            "stock_levels_computed",
            materials=len(levels),
            entries=len(entries),
            movements=len(movements),
        )
        return levels

    async def level_for(self, material_id: str) -> StockLevel | None:
        """Stock level for one material; None when it is missing or inactive."""
        material = await self._store.get_material(material_id)
        if material is None or not material.is_active:
            return None

        entries = await self._store.list_entries(raw_material_id=material_id)
        movements = await self._store.list_movements(raw_material_id=material_id)
        allocations = await self._store.list_section_inventory(raw_material_id=material_id)

        return build_stock_level(
            material,
            entries,
            index_movements_by_entry(movements),
            allocated=sum(row.quantity for row in allocations),
        )

    async def low_stock_levels(self) -> list[StockLevel]:
        return [level for level in await self.current_levels() if level.is_low_stock]

    async def entry_balances(self, material_id: str) -> list[EntryBalance]:
        """Remaining quantity on each of a material's entries, oldest first."""
        entries = await self._store.list_entries(raw_material_id=material_id)
        movements = await self._store.list_movements(raw_material_id=material_id)
        return entry_balances(entries, index_movements_by_entry(movements))

    async def entry_remaining(self, entry_id: str) -> float | None:
        """Quantity left on a single entry; None when the entry does not exist."""
        entry = await self._store.get_entry(entry_id)
        if entry is None:
            return None
        movements = await self._store.list_movements(stock_entry_id=entry_id)
        return entry.quantity - consumed_quantity(movements)

    async def allocate_fifo(self, material_id: str, quantity: float) -> list[tuple[StockEntry, float]]:
        """Split ``quantity`` of a material across its entries, oldest first."""
        return allocate_fifo(await self.entry_balances(material_id), quantity)

    async def section_levels(self, section_id: str) -> list[SectionStockLevel]:
        rows = await self._store.list_section_inventory(section_id=section_id)
        materials = {}
        for row in rows:
            if row.raw_material_id not in materials:
                material = await self._store.get_material(row.raw_material_id)
                if material is not None:
                    materials[row.raw_material_id] = material
        return build_section_levels(rows, materials)
