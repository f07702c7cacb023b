"""SQLite implementation of ledger storage."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.material import MaterialCategory, MeasurementUnit, RawMaterial
from stockledger.core.entities.section import (
    ConsumptionSource,
    Section,
    SectionConsumption,
    SectionInventory,
    SectionType,
)
from stockledger.core.entities.stock import MovementType, StockEntry, StockMovement
from stockledger.core.exceptions import DatabaseError
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.infrastructure.storage.sqlite.connection import ConnectionPool

logger = get_logger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: datetime | None) -> str | None:
    """Store datetimes as UTC ISO text so they sort lexically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return date.fromisoformat(value)


class SQLiteLedgerStore(ILedgerStore):
    """
    SQLite implementation of the ledger store.

    An instance created with only a pool reads through pooled connections
    and wraps each write in its own transaction. ``transaction()`` returns an
    instance bound to one connection; everything done through it belongs to
    that transaction.
    """

    def __init__(self, pool: ConnectionPool, conn: aiosqlite.Connection | None = None):
        self._pool = pool
        self._conn = conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLiteLedgerStore"]:
        if self._conn is not None:
            # Already inside a transaction: join it.
            yield self
            return
        try:
            async with self._pool.transaction() as conn:
                yield SQLiteLedgerStore(self._pool, conn)
        except aiosqlite.Error as e:
            logger.error("ledger_transaction_failed", error=str(e))
            raise DatabaseError("transaction", str(e)) from e

    @asynccontextmanager
    async def _reader(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            if self._conn is not None:
                yield self._conn
            else:
                async with self._pool.acquire() as conn:
                    yield conn
        except aiosqlite.Error as e:
            raise DatabaseError("read", str(e)) from e

    @asynccontextmanager
    async def _writer(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            if self._conn is not None:
                yield self._conn
            else:
                async with self._pool.transaction() as conn:
                    yield conn
        except aiosqlite.Error as e:
            raise DatabaseError("write", str(e)) from e

    async def _fetch_one(self, sql: str, params: tuple = ()) -> aiosqlite.Row | None:
        async with self._reader() as conn:
            cursor = await conn.execute(sql, params)
            return await cursor.fetchone()

    async def _fetch_all(self, sql: str, params: tuple | list = ()) -> list[aiosqlite.Row]:
        async with self._reader() as conn:
            cursor = await conn.execute(sql, params)
            return list(await cursor.fetchall())

    # --- Raw materials ---

    async def create_material(self, material: RawMaterial) -> RawMaterial:
        """Create a new raw material."""
        now = datetime.now(UTC)
        material.id = material.id or _new_id()
        material.created_at = now
        material.updated_at = now
        async with self._writer() as conn:
            await conn.execute(
                """
                INSERT INTO raw_materials (
                    id, name, description, category, unit, unit_cost, supplier,
                    min_stock_level, max_stock_level, is_active, units_per_pack,
                    base_unit, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    material.id,
                    material.name,
                    material.description,
                    material.category.value,
                    material.unit.value,
                    material.unit_cost,
                    material.supplier,
                    material.min_stock_level,
                    material.max_stock_level,
                    int(material.is_active),
                    material.units_per_pack,
                    material.base_unit.value if material.base_unit else None,
                    _iso(material.created_at),
                    _iso(material.updated_at),
                ),
            )
        logger.info("material_created", material_id=material.id, name=material.name)
        return material

    async def get_material(self, material_id: str) -> RawMaterial | None:
        """Get raw material by ID."""
        row = await self._fetch_one("SELECT * FROM raw_materials WHERE id = ?", (material_id,))
        return self._row_to_material(row) if row else None

    async def list_materials(
        self,
        category: MaterialCategory | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[RawMaterial]:
        """List raw materials ordered by name."""
        sql = "SELECT * FROM raw_materials WHERE 1=1"
        params: list = []
        if category is not None:
            sql += " AND category = ?"
            params.append(category.value)
        if is_active is not None:
            sql += " AND is_active = ?"
            params.append(int(is_active))
        if search:
            sql += " AND (name LIKE ? OR description LIKE ? OR supplier LIKE ?)"
            pattern = f"%{search}%"
            params.extend([pattern, pattern, pattern])
        sql += " ORDER BY name COLLATE NOCASE"

        rows = await self._fetch_all(sql, params)
        return [self._row_to_material(row) for row in rows]

    async def update_material(self, material: RawMaterial) -> RawMaterial:
        """Update a raw material."""
        material.updated_at = datetime.now(UTC)
        async with self._writer() as conn:
            await conn.execute(
                """
                UPDATE raw_materials SET
                    name = ?, description = ?, category = ?, unit = ?,
                    unit_cost = ?, supplier = ?, min_stock_level = ?,
                    max_stock_level = ?, is_active = ?, units_per_pack = ?,
                    base_unit = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    material.name,
                    material.description,
                    material.category.value,
                    material.unit.value,
                    material.unit_cost,
                    material.supplier,
                    material.min_stock_level,
                    material.max_stock_level,
                    int(material.is_active),
                    material.units_per_pack,
                    material.base_unit.value if material.base_unit else None,
                    _iso(material.updated_at),
                    material.id,
                ),
            )
        logger.info("material_updated", material_id=material.id)
        return material

    # --- Stock entries ---

    async def add_entry(self, entry: StockEntry) -> StockEntry:
        """Insert a stock entry."""
        now = datetime.now(UTC)
        entry.id = entry.id or _new_id()
        entry.created_at = now
        entry.updated_at = now
        entry.recompute_total()
        async with self._writer() as conn:
            await conn.execute(
                """
                INSERT INTO stock_entries (
                    id, raw_material_id, quantity, unit_cost, total_cost, supplier,
                    batch_number, expiry_date, received_date, received_by, notes,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.raw_material_id,
                    entry.quantity,
                    entry.unit_cost,
                    entry.total_cost,
                    entry.supplier,
                    entry.batch_number,
                    entry.expiry_date.isoformat() if entry.expiry_date else None,
                    _iso(entry.received_date),
                    entry.received_by,
                    entry.notes,
                    _iso(entry.created_at),
                    _iso(entry.updated_at),
                ),
            )
        return entry

    async def get_entry(self, entry_id: str) -> StockEntry | None:
        """Get stock entry by ID."""
        row = await self._fetch_one("SELECT * FROM stock_entries WHERE id = ?", (entry_id,))
        return self._row_to_entry(row) if row else None

    async def list_entries(
        self,
        raw_material_id: str | None = None,
        supplier: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> list[StockEntry]:
        """List stock entries, newest received first."""
        sql = "SELECT * FROM stock_entries WHERE 1=1"
        params: list = []
        if raw_material_id:
            sql += " AND raw_material_id = ?"
            params.append(raw_material_id)
        if supplier:
            sql += " AND supplier = ?"
            params.append(supplier)
        if from_date:
            sql += " AND received_date >= ?"
            params.append(_iso(from_date))
        if to_date:
            sql += " AND received_date <= ?"
            params.append(_iso(to_date))
        sql += " ORDER BY received_date DESC, created_at DESC"

        rows = await self._fetch_all(sql, params)
        return [self._row_to_entry(row) for row in rows]

    async def update_entry(self, entry: StockEntry) -> StockEntry:
        """Apply a corrective edit to a stock entry."""
        entry.updated_at = datetime.now(UTC)
        entry.recompute_total()
        async with self._writer() as conn:
            await conn.execute(
                """
                UPDATE stock_entries SET
                    raw_material_id = ?, quantity = ?, unit_cost = ?, total_cost = ?,
                    supplier = ?, batch_number = ?, expiry_date = ?, received_date = ?,
                    received_by = ?, notes = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    entry.raw_material_id,
                    entry.quantity,
                    entry.unit_cost,
                    entry.total_cost,
                    entry.supplier,
                    entry.batch_number,
                    entry.expiry_date.isoformat() if entry.expiry_date else None,
                    _iso(entry.received_date),
                    entry.received_by,
                    entry.notes,
                    _iso(entry.updated_at),
                    entry.id,
                ),
            )
        return entry

    async def delete_entry(self, entry_id: str) -> bool:
        """Delete a stock entry and its movements."""
        async with self._writer() as conn:
            await conn.execute("DELETE FROM stock_movements WHERE stock_entry_id = ?", (entry_id,))
            cursor = await conn.execute("DELETE FROM stock_entries WHERE id = ?", (entry_id,))
            return cursor.rowcount > 0

    # --- Stock movements ---

    async def add_movement(self, movement: StockMovement) -> StockMovement:
        """Append a stock movement."""
        movement.id = movement.id or _new_id()
        async with self._writer() as conn:
            await conn.execute(
                """
                INSERT INTO stock_movements (
                    id, stock_entry_id, type, quantity, from_section_id,
                    to_section_id, reason, performed_by, reference_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.id,
                    movement.stock_entry_id,
                    movement.type.value,
                    movement.quantity,
                    movement.from_section_id,
                    movement.to_section_id,
                    movement.reason,
                    movement.performed_by,
                    movement.reference_id,
                    _iso(movement.created_at),
                ),
            )
        return movement

    async def list_movements(
        self,
        stock_entry_id: str | None = None,
        movement_type: MovementType | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        section_id: str | None = None,
        raw_material_id: str | None = None,
    ) -> list[StockMovement]:
        """List stock movements, newest first."""
        sql = "SELECT sm.* FROM stock_movements sm"
        params: list = []
        if raw_material_id:
            sql += " JOIN stock_entries se ON se.id = sm.stock_entry_id WHERE se.raw_material_id = ?"
            params.append(raw_material_id)
        else:
            sql += " WHERE 1=1"
        if stock_entry_id:
            sql += " AND sm.stock_entry_id = ?"
            params.append(stock_entry_id)
        if movement_type is not None:
            sql += " AND sm.type = ?"
            params.append(movement_type.value)
        if from_date:
            sql += " AND sm.created_at >= ?"
            params.append(_iso(from_date))
        if to_date:
            sql += " AND sm.created_at <= ?"
            params.append(_iso(to_date))
        if section_id:
            sql += " AND (sm.from_section_id = ? OR sm.to_section_id = ?)"
            params.extend([section_id, section_id])
        sql += " ORDER BY sm.created_at DESC, sm.rowid DESC"

        rows = await self._fetch_all(sql, params)
        return [self._row_to_movement(row) for row in rows]

    # --- Sections ---

    async def create_section(self, section: Section) -> Section:
        """Create a new section."""
        now = datetime.now(UTC)
        section.id = section.id or _new_id()
        section.created_at = now
        section.updated_at = now
        async with self._writer() as conn:
            await conn.execute(
                """
                INSERT INTO sections (
                    id, name, description, type, manager_id, is_active,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    section.id,
                    section.name,
                    section.description,
                    section.type.value,
                    section.manager_id,
                    int(section.is_active),
                    _iso(section.created_at),
                    _iso(section.updated_at),
                ),
            )
        logger.info("section_created", section_id=section.id, name=section.name)
        return section

    async def get_section(self, section_id: str) -> Section | None:
        """Get section by ID."""
        row = await self._fetch_one("SELECT * FROM sections WHERE id = ?", (section_id,))
        return self._row_to_section(row) if row else None

    async def list_sections(
        self,
        section_type: SectionType | None = None,
        is_active: bool | None = None,
        manager_id: str | None = None,
        search: str | None = None,
    ) -> list[Section]:
        """List sections ordered by name."""
        sql = "SELECT * FROM sections WHERE 1=1"
        params: list = []
        if section_type is not None:
            sql += " AND type = ?"
            params.append(section_type.value)
        if is_active is not None:
            sql += " AND is_active = ?"
            params.append(int(is_active))
        if manager_id:
            sql += " AND manager_id = ?"
            params.append(manager_id)
        if search:
            sql += " AND (name LIKE ? OR description LIKE ?)"
            params.extend([f"%{search}%", f"%{search}%"])
        sql += " ORDER BY name COLLATE NOCASE"

        rows = await self._fetch_all(sql, params)
        return [self._row_to_section(row) for row in rows]

    async def update_section(self, section: Section) -> Section:
        """Update a section."""
        section.updated_at = datetime.now(UTC)
        async with self._writer() as conn:
            await conn.execute(
                """
                UPDATE sections SET
                    name = ?, description = ?, type = ?, manager_id = ?,
                    is_active = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    section.name,
                    section.description,
                    section.type.value,
                    section.manager_id,
                    int(section.is_active),
                    _iso(section.updated_at),
                    section.id,
                ),
            )
        logger.info("section_updated", section_id=section.id)
        return section

    # --- Section inventory ---

    async def get_section_inventory(self, inventory_id: str) -> SectionInventory | None:
        """Get a section inventory row by ID."""
        row = await self._fetch_one("SELECT * FROM section_inventory WHERE id = ?", (inventory_id,))
        return self._row_to_section_inventory(row) if row else None

    async def find_section_inventory(
        self, section_id: str, raw_material_id: str
    ) -> SectionInventory | None:
        """Get the row for a (section, material) pair."""
        row = await self._fetch_one(
            "SELECT * FROM section_inventory WHERE section_id = ? AND raw_material_id = ?",
            (section_id, raw_material_id),
        )
        return self._row_to_section_inventory(row) if row else None

    async def list_section_inventory(
        self,
        section_id: str | None = None,
        raw_material_id: str | None = None,
    ) -> list[SectionInventory]:
        """List section inventory rows."""
        sql = "SELECT * FROM section_inventory WHERE 1=1"
        params: list = []
        if section_id:
            sql += " AND section_id = ?"
            params.append(section_id)
        if raw_material_id:
            sql += " AND raw_material_id = ?"
            params.append(raw_material_id)
        sql += " ORDER BY section_id, raw_material_id"

        rows = await self._fetch_all(sql, params)
        return [self._row_to_section_inventory(row) for row in rows]

    async def save_section_inventory(self, row: SectionInventory) -> SectionInventory:
        """Insert the row when it has no ID, update it otherwise."""
        async with self._writer() as conn:
            if row.id is None:
                row.id = _new_id()
                row.created_at = datetime.now(UTC)
                await conn.execute(
                    """
                    INSERT INTO section_inventory (
                        id, section_id, raw_material_id, quantity, reserved_quantity,
                        min_level, max_level, last_updated, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        row.id,
                        row.section_id,
                        row.raw_material_id,
                        row.quantity,
                        row.reserved_quantity,
                        row.min_level,
                        row.max_level,
                        _iso(row.last_updated),
                        _iso(row.created_at),
                    ),
                )
            else:
                await conn.execute(
                    """
                    UPDATE section_inventory SET
                        quantity = ?, reserved_quantity = ?, min_level = ?,
                        max_level = ?, last_updated = ?
                    WHERE id = ?
                    """,
                    (
                        row.quantity,
                        row.reserved_quantity,
                        row.min_level,
                        row.max_level,
                        _iso(row.last_updated),
                        row.id,
                    ),
                )
        return row

    async def delete_section_inventory(self, inventory_id: str) -> bool:
        """Delete a section inventory row."""
        async with self._writer() as conn:
            cursor = await conn.execute("DELETE FROM section_inventory WHERE id = ?", (inventory_id,))
            return cursor.rowcount > 0

    # --- Section consumption ---

    async def add_consumption(self, consumption: SectionConsumption) -> SectionConsumption:
        """Append a section consumption record."""
        consumption.id = consumption.id or _new_id()
        async with self._writer() as conn:
            await conn.execute(
                """
                INSERT INTO section_consumption (
                    id, section_id, raw_material_id, quantity, unit_cost, total_cost,
                    consumed_date, consumed_by, reason, order_id, notes, source
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    consumption.id,
                    consumption.section_id,
                    consumption.raw_material_id,
                    consumption.quantity,
                    consumption.unit_cost,
                    consumption.total_cost,
                    _iso(consumption.consumed_date),
                    consumption.consumed_by,
                    consumption.reason,
                    consumption.order_id,
                    consumption.notes,
                    consumption.source.value,
                ),
            )
        return consumption

    async def list_consumption(
        self,
        section_id: str | None = None,
        raw_material_id: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        source: ConsumptionSource | None = None,
    ) -> list[SectionConsumption]:
        """List consumption records, newest first."""
        sql = "SELECT * FROM section_consumption WHERE 1=1"
        params: list = []
        if section_id:
            sql += " AND section_id = ?"
            params.append(section_id)
        if raw_material_id:
            sql += " AND raw_material_id = ?"
            params.append(raw_material_id)
        if from_date:
            sql += " AND consumed_date >= ?"
            params.append(_iso(from_date))
        if to_date:
            sql += " AND consumed_date <= ?"
            params.append(_iso(to_date))
        if source is not None:
            sql += " AND source = ?"
            params.append(source.value)
        sql += " ORDER BY consumed_date DESC, rowid DESC"

        rows = await self._fetch_all(sql, params)
        return [self._row_to_consumption(row) for row in rows]

    # --- Row converters ---

    @staticmethod
    def _row_to_material(row: aiosqlite.Row) -> RawMaterial:
        return RawMaterial(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            category=MaterialCategory(row["category"]),
            unit=MeasurementUnit(row["unit"]),
            unit_cost=float(row["unit_cost"]),
            supplier=row["supplier"],
            min_stock_level=float(row["min_stock_level"]),
            max_stock_level=float(row["max_stock_level"]),
            is_active=bool(row["is_active"]),
            units_per_pack=row["units_per_pack"],
            base_unit=MeasurementUnit(row["base_unit"]) if row["base_unit"] else None,
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> StockEntry:
        return StockEntry(
            id=row["id"],
            raw_material_id=row["raw_material_id"],
            quantity=float(row["quantity"]),
            unit_cost=float(row["unit_cost"]),
            supplier=row["supplier"],
            batch_number=row["batch_number"],
            expiry_date=_parse_date(row["expiry_date"]),
            received_date=_parse_datetime(row["received_date"]),
            received_by=row["received_by"],
            notes=row["notes"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        return StockMovement(
            id=row["id"],
            stock_entry_id=row["stock_entry_id"],
            type=MovementType(row["type"]),
            quantity=float(row["quantity"]),
            from_section_id=row["from_section_id"],
            to_section_id=row["to_section_id"],
            reason=row["reason"],
            performed_by=row["performed_by"],
            reference_id=row["reference_id"],
            created_at=_parse_datetime(row["created_at"]),
        )

    @staticmethod
    def _row_to_section(row: aiosqlite.Row) -> Section:
        return Section(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            type=SectionType(row["type"]),
            manager_id=row["manager_id"],
            is_active=bool(row["is_active"]),
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    @staticmethod
    def _row_to_section_inventory(row: aiosqlite.Row) -> SectionInventory:
        return SectionInventory(
            id=row["id"],
            section_id=row["section_id"],
            raw_material_id=row["raw_material_id"],
            quantity=float(row["quantity"]),
            reserved_quantity=float(row["reserved_quantity"]),
            min_level=row["min_level"],
            max_level=row["max_level"],
            last_updated=_parse_datetime(row["last_updated"]),
            created_at=_parse_datetime(row["created_at"]),
        )

    @staticmethod
    def _row_to_consumption(row: aiosqlite.Row) -> SectionConsumption:
        return SectionConsumption(
            id=row["id"],
            section_id=row["section_id"],
            raw_material_id=row["raw_material_id"],
            quantity=float(row["quantity"]),
            unit_cost=float(row["unit_cost"]),
            total_cost=float(row["total_cost"]),
            consumed_date=_parse_datetime(row["consumed_date"]),
            consumed_by=row["consumed_by"],
            reason=row["reason"],
            order_id=row["order_id"],
            notes=row["notes"],
            source=ConsumptionSource(row["source"]),
        )
