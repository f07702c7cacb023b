"""Unit tests for raw material entity."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from stockledger.core.entities.material import (
    PACK_UNITS,
    MaterialCategory,
    MeasurementUnit,
    RawMaterial,
)


class TestRawMaterial:
    """Tests for RawMaterial entity."""

    def test_create_with_defaults(self):
        m = RawMaterial(name="Salt", unit=MeasurementUnit.KG, unit_cost=1.5, max_stock_level=50)
        assert m.id is None
        assert m.category == MaterialCategory.OTHER
        assert m.min_stock_level == 0.0
        assert m.is_active is True
        assert m.units_per_pack is None
        assert isinstance(m.created_at, datetime)
        assert m.created_at.tzinfo is not None

    def test_unit_cost_must_be_positive(self):
        with pytest.raises(ValidationError, match="unit_cost"):
            RawMaterial(name="Salt", unit=MeasurementUnit.KG, unit_cost=0, max_stock_level=50)

    def test_negative_min_level_rejected(self):
        with pytest.raises(ValidationError, match="min_stock_level"):
            RawMaterial(
                name="Salt",
                unit=MeasurementUnit.KG,
                unit_cost=1,
                min_stock_level=-1,
                max_stock_level=50,
            )

    def test_max_level_must_exceed_min_level(self):
        with pytest.raises(ValidationError, match="max_stock_level"):
            RawMaterial(
                name="Salt",
                unit=MeasurementUnit.KG,
                unit_cost=1,
                min_stock_level=50,
                max_stock_level=50,
            )

    def test_category_from_string(self):
        m = RawMaterial(name="Milk", category="dairy", unit="liters", unit_cost=1, max_stock_level=20)
        assert m.category == MaterialCategory.DAIRY
        assert m.unit == MeasurementUnit.LITERS

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValidationError):
            RawMaterial(name="Milk", unit="gallons", unit_cost=1, max_stock_level=20)

    @pytest.mark.parametrize("unit", [MeasurementUnit.PACKS, MeasurementUnit.BOXES])
    def test_pack_units(self, unit):
        m = RawMaterial(name="Buns", unit=unit, unit_cost=24, max_stock_level=100, units_per_pack=12)
        assert m.is_pack_unit
        assert unit in PACK_UNITS

    def test_plain_unit_is_not_pack(self, flour):
        assert not flour.is_pack_unit
