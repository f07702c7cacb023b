"""Unit tests for report builders."""

from datetime import UTC, datetime, timedelta

import pytest

from stockledger.core.entities.material import MaterialCategory, MeasurementUnit, RawMaterial
from stockledger.core.entities.stock import MovementType, StockEntry, StockMovement
from stockledger.core.services.reports import (
    build_consumption_report,
    build_expense_report,
    build_low_stock_report,
    consumption_by_category,
    total_inventory_value,
    value_by_category,
)
from stockledger.core.services.stock_aggregator import build_stock_level

T0 = datetime(2024, 3, 1, tzinfo=UTC)


@pytest.fixture
def materials(flour):
    flour.id = "flour"
    milk = RawMaterial(
        id="milk",
        name="Milk",
        category=MaterialCategory.DAIRY,
        unit=MeasurementUnit.LITERS,
        unit_cost=1.0,
        min_stock_level=10,
        max_stock_level=50,
    )
    return [flour, milk]


@pytest.fixture
def entries():
    return [
        StockEntry(
            id="e-flour",
            raw_material_id="flour",
            quantity=100,
            unit_cost=2.0,
            supplier="Mill Co",
            received_date=T0,
            received_by="alice",
        ),
        StockEntry(
            id="e-milk",
            raw_material_id="milk",
            quantity=40,
            unit_cost=1.5,
            supplier="Dairy Farm",
            received_date=T0 + timedelta(days=2),
            received_by="alice",
        ),
        StockEntry(
            id="e-flour-2",
            raw_material_id="flour",
            quantity=50,
            unit_cost=3.0,
            supplier="Mill Co",
            received_date=T0 + timedelta(days=5),
            received_by="alice",
        ),
    ]


def movement(entry_id, movement_type, quantity, reason="Service", section_id=None, day=1):
    return StockMovement(
        stock_entry_id=entry_id,
        type=movement_type,
        quantity=quantity,
        reason=reason,
        performed_by="chef",
        from_section_id=section_id,
        created_at=T0 + timedelta(days=day),
    )


class TestConsumptionReport:
    def test_values_consumption_at_entry_cost(self, materials, entries):
        movements = [
            movement("e-flour", MovementType.OUT, 10),
            movement("e-flour-2", MovementType.OUT, 10),
            movement("e-milk", MovementType.EXPIRED, 4, reason="Expired"),
            movement("e-flour", MovementType.TRANSFER, 30),
            movement("e-flour", MovementType.IN, 100),
        ]

        report = build_consumption_report(movements, entries, materials)

        assert report.movement_count == 3
        assert report.total_quantity == 24
        assert report.total_value == pytest.approx(10 * 2.0 + 10 * 3.0 + 4 * 1.5)
        assert report.waste_quantity == 4
        assert report.waste_value == pytest.approx(6.0)
        assert report.by_category == {"grains": pytest.approx(50.0), "dairy": pytest.approx(6.0)}

    def test_top_materials_sorted_and_limited(self, materials, entries):
        movements = [
            movement("e-flour", MovementType.OUT, 1),
            movement("e-milk", MovementType.OUT, 20),
        ]

        report = build_consumption_report(movements, entries, materials, top_n=1)

        assert [m.raw_material_id for m in report.top_materials] == ["milk"]
        assert report.top_materials[0].value == pytest.approx(30.0)

    def test_reason_breakdown(self, materials, entries):
        movements = [
            movement("e-flour", MovementType.OUT, 2, reason="Breakfast"),
            movement("e-flour", MovementType.OUT, 3, reason="Breakfast"),
            movement("e-flour", MovementType.DAMAGED, 1, reason="Spilled"),
        ]

        report = build_consumption_report(movements, entries, materials)

        reasons = {r.reason: r for r in report.by_reason}
        assert reasons["Breakfast"].count == 2
        assert reasons["Breakfast"].quantity == 5
        assert reasons["Spilled"].value == pytest.approx(2.0)
        assert report.by_reason[0].reason == "Breakfast"

    def test_section_filter(self, materials, entries):
        movements = [
            movement("e-flour", MovementType.OUT, 2, section_id="kitchen"),
            movement("e-flour", MovementType.OUT, 3, section_id="bar"),
            movement("e-flour", MovementType.OUT, 4),
        ]

        report = build_consumption_report(movements, entries, materials, section_id="kitchen")

        assert report.movement_count == 1
        assert report.total_quantity == 2

    def test_date_window(self, materials, entries):
        movements = [
            movement("e-flour", MovementType.OUT, 2, day=1),
            movement("e-flour", MovementType.OUT, 3, day=10),
        ]

        report = build_consumption_report(
            movements, entries, materials, from_date=T0 + timedelta(days=5), to_date=T0 + timedelta(days=20)
        )

        assert report.total_quantity == 3

    def test_empty(self, materials, entries):
        report = build_consumption_report([], entries, materials)
        assert report.movement_count == 0
        assert report.top_materials == []

    def test_consumption_by_category(self, materials, entries):
        movements = [movement("e-milk", MovementType.OUT, 2)]
        assert consumption_by_category(movements, entries, materials) == {"dairy": pytest.approx(3.0)}


class TestExpenseReport:
    def test_totals_and_rankings(self, materials, entries):
        report = build_expense_report(entries, materials)

        assert report.entry_count == 3
        assert report.total_purchases == pytest.approx(200 + 60 + 150)
        assert report.average_order_value == pytest.approx(410 / 3)
        assert report.top_materials[0].raw_material_id == "flour"
        assert report.top_materials[0].purchase_count == 2
        assert report.top_materials[0].average_unit_cost == pytest.approx(350 / 150)
        assert report.top_materials[0].last_purchase_date == T0 + timedelta(days=5)
        assert [s.supplier for s in report.suppliers] == ["Mill Co", "Dairy Farm"]

    def test_window_excludes_old_entries(self, materials, entries):
        report = build_expense_report(entries, materials, from_date=T0 + timedelta(days=1))
        assert report.entry_count == 2
        assert report.total_purchases == pytest.approx(210)

    def test_naive_window_bounds_count_as_utc(self, materials, entries):
        report = build_expense_report(entries, materials, from_date=datetime(2024, 3, 2), to_date=datetime(2024, 3, 4))
        assert report.entry_count == 1
        assert report.top_materials[0].raw_material_id == "milk"

    def test_empty(self, materials):
        report = build_expense_report([], materials)
        assert report.entry_count == 0
        assert report.average_order_value == 0


class TestLowStockReport:
    def _level(self, material, available):
        entries = []
        if available:
            entries = [
                StockEntry(
                    id="e",
                    raw_material_id=material.id,
                    quantity=available,
                    unit_cost=1,
                    received_date=T0,
                    received_by="x",
                )
            ]
        return build_stock_level(material, entries, {})

    def test_buckets(self, materials):
        flour, milk = materials
        sugar = flour.model_copy(update={"id": "sugar", "name": "Sugar"})
        rice = flour.model_copy(update={"id": "rice", "name": "Rice"})
        levels = [
            self._level(flour, 0),  # critical
            self._level(milk, 4),  # warning: 4 <= 10 * 0.5
            self._level(sugar, 8),  # low
            self._level(rice, 150),  # fine
        ]

        report = build_low_stock_report(levels, warning_ratio=0.5)

        assert [i.raw_material_id for i in report.critical] == ["flour"]
        assert [i.raw_material_id for i in report.warning] == ["milk"]
        assert [i.raw_material_id for i in report.low] == ["sugar"]
        assert report.total == 3

    def test_reorder_quantity_fills_to_max(self, materials):
        flour, _ = materials
        report = build_low_stock_report([self._level(flour, 5)])

        (item,) = report.warning
        assert item.reorder_quantity == 195
        assert item.estimated_cost == pytest.approx(195 * 2.0)
        assert report.estimated_restock_cost == pytest.approx(390.0)


class TestInventoryValue:
    def test_value_by_category_ignores_negative(self, materials):
        flour, milk = materials
        levels = [
            build_stock_level(
                flour,
                [StockEntry(id="e", raw_material_id="flour", quantity=20, unit_cost=2, received_date=T0, received_by="x")],
                {},
            ),
            build_stock_level(milk, [], {}),
        ]

        assert value_by_category(levels) == {"grains": pytest.approx(40.0), "dairy": 0.0}
        assert total_inventory_value(levels) == pytest.approx(40.0)
