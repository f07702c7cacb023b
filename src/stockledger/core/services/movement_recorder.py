"""
Movement recording service.

The only writer of ledger state. Every command runs inside a single store
transaction, so the availability check and the writes that depend on it
commit together or not at all.

Quantities and unit costs passed in are expressed in the material's
declared unit (packs for pack materials); they are converted to base units
before they reach the ledger.
"""

from datetime import UTC, date, datetime
from typing import Any

from stockledger.config import get_logger
from stockledger.core.entities.material import RawMaterial
from stockledger.core.entities.section import (
    ConsumptionSource,
    Section,
    SectionConsumption,
    SectionInventory,
)
from stockledger.core.entities.stock import (
    CONSUMING_TYPES,
    MovementType,
    StockEntry,
    StockMovement,
)
from stockledger.core.exceptions import (
    EntryInUseError,
    InsufficientStockError,
    MaterialNotFoundError,
    SectionInventoryNotFoundError,
    SectionNotFoundError,
    StockEntryNotFoundError,
    ValidationError,
)
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.core.services.stock_aggregator import (
    StockLevelAggregator,
    allocate_fifo,
    build_stock_level,
    index_movements_by_entry,
)
from stockledger.core.services.unit_conversion import (
    cost_per_base_unit,
    describe_pack_quantity,
    pack_info,
    to_base,
)

logger = get_logger(__name__)

ENTRY_FIELDS = frozenset(
    {
        "raw_material_id",
        "quantity",
        "unit_cost",
        "supplier",
        "batch_number",
        "expiry_date",
        "received_date",
        "received_by",
        "notes",
    }
)


def _require_positive(field: str, value: float) -> None:
    if value is None or value <= 0:
        raise ValidationError(field, "must be greater than 0", value)


def _with_pack_note(text: str, quantity: float, material: RawMaterial) -> str:
    description = describe_pack_quantity(quantity, material)
    if description is None:
        return text
    return f"{text} ({description})"


class MovementRecorder:
    """Validates and appends stock movements, entries and section changes."""

    def __init__(self, store: ILedgerStore) -> None:
        self._store = store

    # --- Lookups (inside a transaction) ---

    @staticmethod
    async def _material(tx: ILedgerStore, material_id: str) -> RawMaterial:
        material = await tx.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material

    @staticmethod
    async def _active_material(tx: ILedgerStore, material_id: str) -> RawMaterial:
        material = await MovementRecorder._material(tx, material_id)
        if not material.is_active:
            raise ValidationError("raw_material_id", "raw material is inactive", material_id)
        return material

    @staticmethod
    async def _entry(tx: ILedgerStore, entry_id: str) -> StockEntry:
        entry = await tx.get_entry(entry_id)
        if entry is None:
            raise StockEntryNotFoundError(entry_id)
        return entry

    @staticmethod
    async def _active_section(tx: ILedgerStore, section_id: str) -> Section:
        section = await tx.get_section(section_id)
        if section is None:
            raise SectionNotFoundError(section_id)
        if not section.is_active:
            raise ValidationError("section_id", "section is inactive", section_id)
        return section

    @staticmethod
    async def _available(tx: ILedgerStore, material: RawMaterial) -> float:
        entries = await tx.list_entries(raw_material_id=material.id)
        movements = await tx.list_movements(raw_material_id=material.id)
        level = build_stock_level(material, entries, index_movements_by_entry(movements))
        return level.available_quantity

    @staticmethod
    async def _ensure_can_withdraw(tx: ILedgerStore, material_id: str, removed: float) -> None:
        """Raise if taking ``removed`` received units out would leave the pool negative."""
        material = await MovementRecorder._material(tx, material_id)
        available = await MovementRecorder._available(tx, material)
        if removed > available:
            logger.warning(
                "insufficient_stock",
                material_id=material_id,
                requested=removed,
                available=available,
            )
            raise InsufficientStockError(material_id, removed, available)

    @staticmethod
    async def _reference_entry(tx: ILedgerStore, material_id: str) -> StockEntry | None:
        """Oldest entry with stock left, else the oldest entry at all."""
        balances = await StockLevelAggregator(tx).entry_balances(material_id)
        if not balances:
            return None
        for balance in balances:
            if balance.remaining > 0:
                return balance.entry
        return balances[0].entry

    # --- Receipts ---

    async def record_receipt(
        self,
        raw_material_id: str,
        quantity: float,
        unit_cost: float,
        received_date: datetime,
        received_by: str,
        supplier: str | None = None,
        batch_number: str | None = None,
        expiry_date: date | None = None,
        notes: str | None = None,
    ) -> tuple[StockEntry, StockMovement]:
        """Create a stock entry and its implicit IN movement."""
        _require_positive("quantity", quantity)
        _require_positive("unit_cost", unit_cost)

        async with self._store.transaction() as tx:
            material = await self._active_material(tx, raw_material_id)

            base_quantity = to_base(quantity, material)
            base_cost = cost_per_base_unit(unit_cost, material)

            entry_notes = notes or ""
            info = pack_info(material)
            if info is not None:
                entry_notes = (
                    f"{entry_notes} ({describe_pack_quantity(quantity, material)}, "
                    f"Pack cost: ${unit_cost:.2f}, Individual cost: ${base_cost:.4f})"
                ).strip()

            entry = await tx.add_entry(
                StockEntry(
                    raw_material_id=raw_material_id,
                    quantity=base_quantity,
                    unit_cost=base_cost,
                    supplier=supplier or material.supplier,
                    batch_number=batch_number,
                    expiry_date=expiry_date,
                    received_date=received_date,
                    received_by=received_by,
                    notes=entry_notes or None,
                )
            )
            movement = await tx.add_movement(
                StockMovement(
                    stock_entry_id=entry.id,  # type: ignore[arg-type]
                    type=MovementType.IN,
                    quantity=base_quantity,
                    reason=_with_pack_note("Stock received", quantity, material),
                    performed_by=received_by,
                )
            )

        logger.info(
            "stock_entry_created",
            entry_id=entry.id,
            material_id=raw_material_id,
            base_quantity=base_quantity,
            total_cost=round(entry.total_cost, 4),
        )
        return entry, movement

    async def update_entry(self, entry_id: str, changes: dict[str, Any], performed_by: str) -> StockEntry:
        """
        Apply a corrective edit to a stock entry.

        ``changes`` holds only the fields being edited. Quantity and unit cost
        are in the declared unit of the entry's (possibly new) material. A
        quantity change is also logged as an ADJUSTMENT movement.
        """
        unknown = set(changes) - ENTRY_FIELDS
        if unknown:
            raise ValidationError("changes", f"unknown fields: {', '.join(sorted(unknown))}")
        if "quantity" in changes:
            _require_positive("quantity", changes["quantity"])
        if "unit_cost" in changes:
            _require_positive("unit_cost", changes["unit_cost"])

        async with self._store.transaction() as tx:
            entry = await self._entry(tx, entry_id)
            movements = await tx.list_movements(stock_entry_id=entry_id)
            used = sum(m.quantity for m in movements if m.is_consuming)

            material_id = changes.get("raw_material_id", entry.raw_material_id)
            if material_id != entry.raw_material_id:
                if any(m.type != MovementType.IN for m in movements):
                    raise ValidationError(
                        "raw_material_id",
                        "cannot move an entry with recorded movements to another material",
                        material_id,
                    )
            material = await self._material(tx, material_id)

            old_quantity = entry.quantity
            if "quantity" in changes:
                new_quantity = to_base(changes["quantity"], material)
                if new_quantity < used:
                    raise ValidationError(
                        "quantity",
                        f"cannot be less than the {used:g} already consumed from this entry",
                        changes["quantity"],
                    )
                entry.quantity = new_quantity

            if material_id != entry.raw_material_id:
                await self._ensure_can_withdraw(tx, entry.raw_material_id, old_quantity)
            elif entry.quantity < old_quantity:
                await self._ensure_can_withdraw(tx, material_id, old_quantity - entry.quantity)
            if "unit_cost" in changes:
                entry.unit_cost = cost_per_base_unit(changes["unit_cost"], material)

            for field in ("raw_material_id", "supplier", "batch_number", "expiry_date",
                          "received_date", "received_by", "notes"):
                if field in changes:
                    setattr(entry, field, changes[field])

            entry.recompute_total()
            entry = await tx.update_entry(entry)

            if entry.quantity != old_quantity:
                await tx.add_movement(
                    StockMovement(
                        stock_entry_id=entry_id,
                        type=MovementType.ADJUSTMENT,
                        quantity=abs(entry.quantity - old_quantity),
                        reason=f"Entry corrected: quantity {old_quantity:g} -> {entry.quantity:g}",
                        performed_by=performed_by,
                    )
                )

        logger.info("stock_entry_updated", entry_id=entry_id, fields=sorted(changes))
        return entry

    async def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry that nothing but its own IN movement references."""
        async with self._store.transaction() as tx:
            entry = await self._entry(tx, entry_id)
            movements = await tx.list_movements(stock_entry_id=entry_id)
            dependent = [m for m in movements if m.type != MovementType.IN]
            if dependent:
                raise EntryInUseError(entry_id, len(dependent))
            await self._ensure_can_withdraw(tx, entry.raw_material_id, entry.quantity)
            deleted = await tx.delete_entry(entry_id)

        logger.info("stock_entry_deleted", entry_id=entry_id)
        return deleted

    # --- Movements ---

    async def record_movement(
        self,
        stock_entry_id: str,
        movement_type: MovementType,
        quantity: float,
        reason: str,
        performed_by: str,
        from_section_id: str | None = None,
        to_section_id: str | None = None,
        reference_id: str | None = None,
    ) -> StockMovement:
        """
        Append a movement against an entry.

        Consuming movements (OUT, EXPIRED, DAMAGED) must fit in the
        material's available quantity. TRANSFER is handled by ``transfer``.
        """
        if movement_type == MovementType.IN:
            raise ValidationError(
                "type", "receipts are recorded as stock entries", movement_type.value
            )
        if movement_type == MovementType.TRANSFER:
            if not to_section_id:
                raise ValidationError("to_section_id", "required for transfers")
            return await self.transfer(
                stock_entry_id,
                from_section_id,
                to_section_id,
                quantity,
                performed_by,
                reason,
            )
        _require_positive("quantity", quantity)

        async with self._store.transaction() as tx:
            entry = await self._entry(tx, stock_entry_id)
            material = await self._material(tx, entry.raw_material_id)
            base_quantity = to_base(quantity, material)

            if movement_type in CONSUMING_TYPES:
                available = await self._available(tx, material)
                if base_quantity > available:
                    logger.warning(
                        "insufficient_stock",
                        material_id=material.id,
                        requested=base_quantity,
                        available=available,
                    )
                    raise InsufficientStockError(material.id, base_quantity, available)  # type: ignore[arg-type]

            movement = await tx.add_movement(
                StockMovement(
                    stock_entry_id=stock_entry_id,
                    type=movement_type,
                    quantity=base_quantity,
                    from_section_id=from_section_id,
                    to_section_id=to_section_id,
                    reason=reason,
                    performed_by=performed_by,
                    reference_id=reference_id,
                )
            )

        logger.info(
            "stock_movement_recorded",
            movement_id=movement.id,
            type=movement_type.value,
            qty=base_quantity,
        )
        return movement

    async def transfer(
        self,
        stock_entry_id: str,
        from_section_id: str | None,
        to_section_id: str,
        quantity: float,
        performed_by: str,
        reason: str,
    ) -> StockMovement:
        """
        Move allocated stock into ``to_section_id``.

        With a source section the quantity comes out of that section's
        inventory; without one it is allocated from central stock, which it
        must fit in. Central available quantity is unchanged either way.
        """
        _require_positive("quantity", quantity)
        if from_section_id and from_section_id == to_section_id:
            raise ValidationError("to_section_id", "must differ from from_section_id", to_section_id)

        async with self._store.transaction() as tx:
            entry = await self._entry(tx, stock_entry_id)
            material = await self._material(tx, entry.raw_material_id)
            await self._active_section(tx, to_section_id)
            base_quantity = to_base(quantity, material)

            if from_section_id:
                await self._active_section(tx, from_section_id)
                source = await tx.find_section_inventory(from_section_id, material.id)  # type: ignore[arg-type]
                held = source.available_quantity if source else 0.0
                if source is None or base_quantity > held:
                    raise InsufficientStockError(
                        material.id,  # type: ignore[arg-type]
                        base_quantity,
                        held,
                        pool="section",
                        section_id=from_section_id,
                    )
                source.quantity -= base_quantity
                source.last_updated = datetime.now(UTC)
                await tx.save_section_inventory(source)
            else:
                available = await self._available(tx, material)
                if base_quantity > available:
                    raise InsufficientStockError(material.id, base_quantity, available)  # type: ignore[arg-type]

            await self._add_to_section(tx, to_section_id, material.id, base_quantity)  # type: ignore[arg-type]

            movement = await tx.add_movement(
                StockMovement(
                    stock_entry_id=stock_entry_id,
                    type=MovementType.TRANSFER,
                    quantity=base_quantity,
                    from_section_id=from_section_id,
                    to_section_id=to_section_id,
                    reason=reason,
                    performed_by=performed_by,
                )
            )

        logger.info(
            "stock_transferred",
            entry_id=stock_entry_id,
            from_section=from_section_id,
            to_section=to_section_id,
            qty=base_quantity,
        )
        return movement

    # --- Sections ---

    @staticmethod
    async def _add_to_section(
        tx: ILedgerStore, section_id: str, material_id: str, base_quantity: float
    ) -> SectionInventory:
        row = await tx.find_section_inventory(section_id, material_id)
        if row is None:
            row = SectionInventory(section_id=section_id, raw_material_id=material_id)
        row.quantity += base_quantity
        row.last_updated = datetime.now(UTC)
        return await tx.save_section_inventory(row)

    async def assign_to_section(
        self,
        section_id: str,
        raw_material_id: str,
        quantity: float,
        assigned_by: str,
        notes: str | None = None,
    ) -> SectionInventory:
        """Allocate central stock to a section."""
        _require_positive("quantity", quantity)

        async with self._store.transaction() as tx:
            await self._active_section(tx, section_id)
            material = await self._active_material(tx, raw_material_id)
            base_quantity = to_base(quantity, material)

            available = await self._available(tx, material)
            if base_quantity > available:
                logger.warning(
                    "insufficient_stock",
                    material_id=raw_material_id,
                    requested=base_quantity,
                    available=available,
                    section_id=section_id,
                )
                raise InsufficientStockError(raw_material_id, base_quantity, available)

            reference = await self._reference_entry(tx, raw_material_id)
            row = await self._add_to_section(tx, section_id, raw_material_id, base_quantity)

            await tx.add_movement(
                StockMovement(
                    stock_entry_id=reference.id,  # type: ignore[union-attr,arg-type]
                    type=MovementType.TRANSFER,
                    quantity=base_quantity,
                    to_section_id=section_id,
                    reason=_with_pack_note(notes or "Stock assigned to section", quantity, material),
                    performed_by=assigned_by,
                    reference_id=row.id,
                )
            )

        logger.info(
            "stock_assigned_to_section",
            section_id=section_id,
            material_id=raw_material_id,
            qty=base_quantity,
            section_qty=row.quantity,
        )
        return row

    async def consume_from_section(
        self,
        section_id: str,
        raw_material_id: str,
        quantity: float,
        consumed_by: str,
        reason: str,
        order_id: str | None = None,
        notes: str | None = None,
        source: ConsumptionSource = ConsumptionSource.MANUAL,
        movement_type: MovementType = MovementType.OUT,
    ) -> SectionConsumption:
        """
        Use up stock held by a section.

        Decrements the section row, appends the consumption record and the
        consuming movements (split across entries oldest first) in one
        transaction.
        """
        _require_positive("quantity", quantity)
        if movement_type not in CONSUMING_TYPES:
            raise ValidationError("movement_type", "must be out, expired or damaged", movement_type.value)

        async with self._store.transaction() as tx:
            await self._active_section(tx, section_id)
            material = await self._material(tx, raw_material_id)
            base_quantity = to_base(quantity, material)

            row = await tx.find_section_inventory(section_id, raw_material_id)
            held = row.available_quantity if row else 0.0
            if row is None or base_quantity > held:
                logger.warning(
                    "insufficient_section_stock",
                    section_id=section_id,
                    material_id=raw_material_id,
                    requested=base_quantity,
                    available=held,
                )
                raise InsufficientStockError(
                    raw_material_id, base_quantity, held, pool="section", section_id=section_id
                )

            balances = await StockLevelAggregator(tx).entry_balances(raw_material_id)
            central = sum(b.remaining for b in balances)
            if base_quantity > central:
                raise InsufficientStockError(raw_material_id, base_quantity, central)

            row.quantity -= base_quantity
            row.last_updated = datetime.now(UTC)
            await tx.save_section_inventory(row)

            unit_cost = cost_per_base_unit(material.unit_cost, material)
            consumption = await tx.add_consumption(
                SectionConsumption(
                    section_id=section_id,
                    raw_material_id=raw_material_id,
                    quantity=base_quantity,
                    unit_cost=unit_cost,
                    total_cost=base_quantity * unit_cost,
                    consumed_by=consumed_by,
                    reason=reason,
                    order_id=order_id,
                    notes=notes,
                    source=source,
                )
            )

            for entry, take in allocate_fifo(balances, base_quantity):
                await tx.add_movement(
                    StockMovement(
                        stock_entry_id=entry.id,  # type: ignore[arg-type]
                        type=movement_type,
                        quantity=take,
                        from_section_id=section_id,
                        reason=reason,
                        performed_by=consumed_by,
                        reference_id=order_id or consumption.id,
                    )
                )

        logger.info(
            "section_consumption_recorded",
            section_id=section_id,
            material_id=raw_material_id,
            qty=base_quantity,
            remaining=row.quantity,
        )
        return consumption

    async def update_section_inventory(
        self,
        inventory_id: str,
        quantity: float,
        updated_by: str,
        notes: str | None = None,
    ) -> SectionInventory:
        """Set a section allocation to ``quantity``; increases must fit in central stock."""
        if quantity < 0:
            raise ValidationError("quantity", "must not be negative", quantity)

        async with self._store.transaction() as tx:
            row = await tx.get_section_inventory(inventory_id)
            if row is None:
                raise SectionInventoryNotFoundError(inventory_id)
            material = await self._material(tx, row.raw_material_id)
            new_quantity = to_base(quantity, material)
            delta = new_quantity - row.quantity

            if delta > 0:
                available = await self._available(tx, material)
                if delta > available:
                    raise InsufficientStockError(row.raw_material_id, delta, available)

            row.quantity = new_quantity
            row.last_updated = datetime.now(UTC)
            row = await tx.save_section_inventory(row)

            reference = await self._reference_entry(tx, row.raw_material_id)
            if reference is not None and delta != 0:
                await tx.add_movement(
                    StockMovement(
                        stock_entry_id=reference.id,  # type: ignore[arg-type]
                        type=MovementType.TRANSFER,
                        quantity=abs(delta),
                        to_section_id=row.section_id if delta > 0 else None,
                        from_section_id=row.section_id if delta < 0 else None,
                        reason=_with_pack_note(notes or "Section inventory updated", quantity, material),
                        performed_by=updated_by,
                        reference_id=row.id,
                    )
                )

        logger.info("section_inventory_updated", inventory_id=inventory_id, quantity=new_quantity)
        return row

    async def remove_section_inventory(
        self, inventory_id: str, removed_by: str, notes: str | None = None
    ) -> bool:
        """Drop a section allocation entirely."""
        async with self._store.transaction() as tx:
            row = await tx.get_section_inventory(inventory_id)
            if row is None:
                raise SectionInventoryNotFoundError(inventory_id)

            deleted = await tx.delete_section_inventory(inventory_id)
            reference = await self._reference_entry(tx, row.raw_material_id)
            if reference is not None and row.quantity > 0:
                await tx.add_movement(
                    StockMovement(
                        stock_entry_id=reference.id,  # type: ignore[arg-type]
                        type=MovementType.TRANSFER,
                        quantity=row.quantity,
                        from_section_id=row.section_id,
                        reason=notes or "Section inventory removed",
                        performed_by=removed_by,
                        reference_id=inventory_id,
                    )
                )

        logger.info("section_inventory_removed", inventory_id=inventory_id, quantity=row.quantity)
        return deleted
