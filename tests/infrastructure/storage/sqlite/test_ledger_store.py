"""Tests for SQLiteLedgerStore."""

from datetime import UTC, date, datetime, timedelta

import pytest

from stockledger.core.entities import (
    ConsumptionSource,
    MaterialCategory,
    MovementType,
    Section,
    SectionConsumption,
    SectionInventory,
    SectionType,
    StockEntry,
    StockMovement,
)
from stockledger.core.exceptions import DatabaseError

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


async def add_entry(store, material_id, quantity=10.0, day=0, supplier=None):
    return await store.add_entry(
        StockEntry(
            raw_material_id=material_id,
            quantity=quantity,
            unit_cost=2.0,
            supplier=supplier,
            received_date=T0 + timedelta(days=day),
            received_by="alice",
            expiry_date=date(2024, 6, 1),
        )
    )


async def add_movement(store, entry_id, movement_type=MovementType.OUT, quantity=1.0, **kwargs):
    return await store.add_movement(
        StockMovement(
            stock_entry_id=entry_id,
            type=movement_type,
            quantity=quantity,
            reason=kwargs.pop("reason", "test"),
            performed_by="bob",
            **kwargs,
        )
    )


class TestMaterials:
    async def test_create_and_get(self, store, flour):
        created = await store.create_material(flour)

        assert created.id is not None
        fetched = await store.get_material(created.id)
        assert fetched.name == "Flour"
        assert fetched.category == MaterialCategory.GRAINS
        assert fetched.max_stock_level == 200
        assert fetched.created_at.tzinfo is not None

    async def test_pack_fields_round_trip(self, store, buns):
        created = await store.create_material(buns)
        fetched = await store.get_material(created.id)
        assert fetched.units_per_pack == 12
        assert fetched.base_unit == buns.base_unit

    async def test_get_missing(self, store):
        assert await store.get_material("nope") is None

    async def test_list_filters(self, store, saved_flour, saved_buns):
        saved_buns.is_active = False
        await store.update_material(saved_buns)

        assert [m.name for m in await store.list_materials()] == ["Burger Buns", "Flour"]
        assert [m.name for m in await store.list_materials(is_active=True)] == ["Flour"]
        assert [m.name for m in await store.list_materials(search="mill")] == ["Flour"]
        assert await store.list_materials(category=MaterialCategory.DAIRY) == []

    async def test_update(self, store, saved_flour):
        saved_flour.unit_cost = 2.5
        await store.update_material(saved_flour)
        assert (await store.get_material(saved_flour.id)).unit_cost == 2.5


class TestEntries:
    async def test_add_and_get(self, store, saved_flour):
        entry = await add_entry(store, saved_flour.id, quantity=12)

        fetched = await store.get_entry(entry.id)
        assert fetched.quantity == 12
        assert fetched.total_cost == pytest.approx(24.0)
        assert fetched.expiry_date == date(2024, 6, 1)
        assert fetched.received_date == T0

    async def test_list_newest_received_first(self, store, saved_flour):
        old = await add_entry(store, saved_flour.id, day=0)
        new = await add_entry(store, saved_flour.id, day=3)

        assert [e.id for e in await store.list_entries()] == [new.id, old.id]

    async def test_list_filters(self, store, saved_flour, saved_buns):
        await add_entry(store, saved_flour.id, day=0, supplier="Mill Co")
        await add_entry(store, saved_flour.id, day=5)
        await add_entry(store, saved_buns.id, day=1)

        assert len(await store.list_entries(raw_material_id=saved_flour.id)) == 2
        assert len(await store.list_entries(supplier="Mill Co")) == 1
        assert len(await store.list_entries(from_date=T0 + timedelta(days=1))) == 2
        assert len(await store.list_entries(to_date=T0 + timedelta(days=1))) == 2

    async def test_update_entry(self, store, saved_flour):
        entry = await add_entry(store, saved_flour.id)
        entry.quantity = 3
        await store.update_entry(entry)

        fetched = await store.get_entry(entry.id)
        assert fetched.quantity == 3
        assert fetched.total_cost == pytest.approx(6.0)

    async def test_delete_removes_movements(self, store, saved_flour):
        entry = await add_entry(store, saved_flour.id)
        await add_movement(store, entry.id, MovementType.IN, 10)

        assert await store.delete_entry(entry.id) is True
        assert await store.get_entry(entry.id) is None
        assert await store.list_movements(stock_entry_id=entry.id) == []
        assert await store.delete_entry(entry.id) is False


class TestMovements:
    async def test_filters(self, store, saved_flour, saved_buns, kitchen, bar):
        flour_entry = await add_entry(store, saved_flour.id)
        bun_entry = await add_entry(store, saved_buns.id)
        await add_movement(store, flour_entry.id, MovementType.OUT, from_section_id=kitchen.id)
        await add_movement(store, flour_entry.id, MovementType.TRANSFER, to_section_id=bar.id)
        await add_movement(store, bun_entry.id, MovementType.EXPIRED)

        assert len(await store.list_movements()) == 3
        assert len(await store.list_movements(raw_material_id=saved_flour.id)) == 2
        assert len(await store.list_movements(movement_type=MovementType.EXPIRED)) == 1
        assert len(await store.list_movements(section_id=kitchen.id)) == 1
        assert len(await store.list_movements(section_id=bar.id)) == 1
        assert len(await store.list_movements(stock_entry_id=bun_entry.id)) == 1

    async def test_newest_first(self, store, saved_flour):
        entry = await add_entry(store, saved_flour.id)
        first = await add_movement(store, entry.id, reason="first", created_at=T0)
        second = await add_movement(store, entry.id, reason="second", created_at=T0 + timedelta(minutes=1))

        assert [m.id for m in await store.list_movements()] == [second.id, first.id]

    async def test_unknown_entry_violates_foreign_key(self, store):
        with pytest.raises(DatabaseError):
            await add_movement(store, "missing-entry")


class TestSections:
    async def test_create_list_update(self, store):
        kitchen = await store.create_section(Section(name="Kitchen", type=SectionType.KITCHEN, manager_id="m1"))
        await store.create_section(Section(name="Bar", type=SectionType.BAR))

        assert [s.name for s in await store.list_sections()] == ["Bar", "Kitchen"]
        assert [s.name for s in await store.list_sections(section_type=SectionType.KITCHEN)] == ["Kitchen"]
        assert [s.name for s in await store.list_sections(manager_id="m1")] == ["Kitchen"]

        kitchen.is_active = False
        await store.update_section(kitchen)
        assert [s.name for s in await store.list_sections(is_active=True)] == ["Bar"]


class TestSectionInventory:
    async def test_save_inserts_then_updates(self, store, saved_flour, kitchen):
        row = await store.save_section_inventory(
            SectionInventory(section_id=kitchen.id, raw_material_id=saved_flour.id, quantity=5)
        )
        assert row.id is not None

        row.quantity = 8
        await store.save_section_inventory(row)

        found = await store.find_section_inventory(kitchen.id, saved_flour.id)
        assert found.id == row.id
        assert found.quantity == 8
        assert len(await store.list_section_inventory(section_id=kitchen.id)) == 1

    async def test_delete(self, store, saved_flour, kitchen):
        row = await store.save_section_inventory(
            SectionInventory(section_id=kitchen.id, raw_material_id=saved_flour.id, quantity=5)
        )
        assert await store.delete_section_inventory(row.id) is True
        assert await store.get_section_inventory(row.id) is None


class TestConsumption:
    async def test_add_and_filter(self, store, saved_flour, kitchen):
        await store.add_consumption(
            SectionConsumption(
                section_id=kitchen.id,
                raw_material_id=saved_flour.id,
                quantity=2,
                unit_cost=2.0,
                total_cost=4.0,
                consumed_by="chef",
                reason="Lunch",
                order_id="ORD-9",
                source=ConsumptionSource.POS,
            )
        )

        records = await store.list_consumption(section_id=kitchen.id)
        assert len(records) == 1
        assert records[0].order_id == "ORD-9"
        assert records[0].source == ConsumptionSource.POS
        assert await store.list_consumption(source=ConsumptionSource.WASTE) == []


class TestTransactions:
    async def test_rollback_discards_writes(self, store, saved_flour):
        with pytest.raises(RuntimeError):
            async with store.transaction() as tx:
                await add_entry(tx, saved_flour.id)
                raise RuntimeError("abort")

        assert await store.list_entries() == []

    async def test_reads_inside_transaction_see_own_writes(self, store, saved_flour):
        async with store.transaction() as tx:
            entry = await add_entry(tx, saved_flour.id)
            assert await tx.get_entry(entry.id) is not None

        assert await store.get_entry(entry.id) is not None

    async def test_nested_transaction_joins_outer(self, store):
        async with store.transaction() as tx:
            async with tx.transaction() as inner:
                assert inner is tx
