"""
Abstract interface for ledger storage.

Covers raw materials, stock entries, stock movements, sections, section
inventory and section consumption. Entries and movements are append-only
apart from corrective entry edits.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from stockledger.core.entities.material import MaterialCategory, RawMaterial
from stockledger.core.entities.section import (
    ConsumptionSource,
    Section,
    SectionConsumption,
    SectionInventory,
    SectionType,
)
from stockledger.core.entities.stock import MovementType, StockEntry, StockMovement


class ILedgerStore(ABC):
    """
    Interface for ledger persistence.

    ``transaction()`` yields a store bound to a single write transaction:
    every read and write made through it sees and commits together, and no
    other writer can interleave.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager["ILedgerStore"]:
        """Open a serialized write transaction."""

    # --- Raw materials ---

    @abstractmethod
    async def create_material(self, material: RawMaterial) -> RawMaterial:
        """Create a new raw material."""

    @abstractmethod
    async def get_material(self, material_id: str) -> RawMaterial | None:
        """Get raw material by ID."""

    @abstractmethod
    async def list_materials(
        self,
        category: MaterialCategory | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[RawMaterial]:
        """List raw materials ordered by name."""

    @abstractmethod
    async def update_material(self, material: RawMaterial) -> RawMaterial:
        """Update a raw material."""

    # --- Stock entries ---

    @abstractmethod
    async def add_entry(self, entry: StockEntry) -> StockEntry:
        """Insert a stock entry."""

    @abstractmethod
    async def get_entry(self, entry_id: str) -> StockEntry | None:
        """Get stock entry by ID."""

    @abstractmethod
    async def list_entries(
        self,
        raw_material_id: str | None = None,
        supplier: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> list[StockEntry]:
        """List stock entries, newest received first."""

    @abstractmethod
    async def update_entry(self, entry: StockEntry) -> StockEntry:
        """Apply a corrective edit to a stock entry."""

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> bool:
        """Delete a stock entry and its movements."""

    # --- Stock movements ---

    @abstractmethod
    async def add_movement(self, movement: StockMovement) -> StockMovement:
        """Append a stock movement."""

    @abstractmethod
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

    # --- Sections ---

    @abstractmethod
    async def create_section(self, section: Section) -> Section:
        """Create a new section."""

    @abstractmethod
    async def get_section(self, section_id: str) -> Section | None:
        """Get section by ID."""

    @abstractmethod
    async def list_sections(
        self,
        section_type: SectionType | None = None,
        is_active: bool | None = None,
        manager_id: str | None = None,
        search: str | None = None,
    ) -> list[Section]:
        """List sections ordered by name."""

    @abstractmethod
    async def update_section(self, section: Section) -> Section:
        """Update a section."""

    # --- Section inventory ---

    @abstractmethod
    async def get_section_inventory(self, inventory_id: str) -> SectionInventory | None:
        """Get a section inventory row by ID."""

    @abstractmethod
    async def find_section_inventory(
        self, section_id: str, raw_material_id: str
    ) -> SectionInventory | None:
        """Get the row for a (section, material) pair."""

    @abstractmethod
    async def list_section_inventory(
        self,
        section_id: str | None = None,
        raw_material_id: str | None = None,
    ) -> list[SectionInventory]:
        """List section inventory rows."""

    @abstractmethod
    async def save_section_inventory(self, row: SectionInventory) -> SectionInventory:
        """Insert the row when it has no ID, update it otherwise."""

    @abstractmethod
    async def delete_section_inventory(self, inventory_id: str) -> bool:
        """Delete a section inventory row."""

    # --- Section consumption ---

    @abstractmethod
    async def add_consumption(self, consumption: SectionConsumption) -> SectionConsumption:
        """Append a section consumption record."""

    @abstractmethod
    async def list_consumption(
        self,
        section_id: str | None = None,
        raw_material_id: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        source: ConsumptionSource | None = None,
    ) -> list[SectionConsumption]:
        """List consumption records, newest first."""
