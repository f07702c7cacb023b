"""Unit tests for stock ledger entities."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from stockledger.core.entities.stock import (
    CONSUMING_TYPES,
    WASTE_TYPES,
    MovementType,
    StockEntry,
    StockMovement,
)


def _entry(**overrides) -> StockEntry:
    data = {
        "raw_material_id": "mat-1",
        "quantity": 10,
        "unit_cost": 2.5,
        "received_date": datetime(2024, 3, 1, tzinfo=UTC),
        "received_by": "alice",
    }
    data.update(overrides)
    return StockEntry(**data)


class TestStockEntry:
    def test_total_cost_computed(self):
        entry = _entry()
        assert entry.total_cost == pytest.approx(25.0)

    def test_supplied_total_cost_is_overridden(self):
        entry = _entry(total_cost=999)
        assert entry.total_cost == pytest.approx(25.0)

    def test_recompute_total_after_edit(self):
        entry = _entry()
        entry.quantity = 4
        entry.recompute_total()
        assert entry.total_cost == pytest.approx(10.0)

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _entry(quantity=-1)

    def test_negative_unit_cost_rejected(self):
        with pytest.raises(ValidationError):
            _entry(unit_cost=-0.5)


class TestStockMovement:
    @pytest.mark.parametrize(
        ("movement_type", "consuming"),
        [
            (MovementType.IN, False),
            (MovementType.OUT, True),
            (MovementType.TRANSFER, False),
            (MovementType.ADJUSTMENT, False),
            (MovementType.EXPIRED, True),
            (MovementType.DAMAGED, True),
        ],
    )
    def test_is_consuming(self, movement_type, consuming):
        movement = StockMovement(
            stock_entry_id="e1",
            type=movement_type,
            quantity=1,
            reason="test",
            performed_by="bob",
        )
        assert movement.is_consuming is consuming

    def test_waste_types_are_consuming(self):
        assert WASTE_TYPES <= CONSUMING_TYPES
        assert MovementType.OUT not in WASTE_TYPES

    def test_quantity_is_a_magnitude(self):
        with pytest.raises(ValidationError):
            StockMovement(
                stock_entry_id="e1",
                type=MovementType.OUT,
                quantity=-3,
                reason="test",
                performed_by="bob",
            )

    def test_type_from_value(self):
        movement = StockMovement(
            stock_entry_id="e1", type="expired", quantity=2, reason="old", performed_by="bob"
        )
        assert movement.type == MovementType.EXPIRED
