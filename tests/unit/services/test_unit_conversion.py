"""Unit tests for pack/box unit conversion."""

import pytest

from stockledger.core.entities.material import MeasurementUnit, RawMaterial
from stockledger.core.exceptions import ValidationError
from stockledger.core.services.unit_conversion import (
    cost_per_base_unit,
    describe_pack_quantity,
    from_base,
    pack_info,
    to_base,
)


class TestPackInfo:
    def test_pack_material(self, buns):
        info = pack_info(buns)
        assert info is not None
        assert info.units_per_pack == 12
        assert info.base_unit == MeasurementUnit.PIECES
        assert info.pack_unit == MeasurementUnit.PACKS

    def test_plain_material_has_none(self, flour):
        assert pack_info(flour) is None

    def test_missing_units_per_pack_defaults_to_one(self):
        boxes = RawMaterial(name="Napkins", unit=MeasurementUnit.BOXES, unit_cost=5, max_stock_level=10)
        info = pack_info(boxes)
        assert info.units_per_pack == 1.0
        assert info.base_unit == MeasurementUnit.PIECES


class TestConversion:
    def test_packs_to_base(self, buns):
        assert to_base(5, buns) == 60

    def test_base_to_packs(self, buns):
        assert from_base(60, buns) == 5
        assert from_base(18, buns) == pytest.approx(1.5)

    def test_plain_unit_is_identity(self, flour):
        assert to_base(7.5, flour) == 7.5
        assert from_base(7.5, flour) == 7.5

    def test_round_trip(self, buns):
        assert from_base(to_base(3.25, buns), buns) == pytest.approx(3.25)

    def test_negative_quantity_rejected(self, buns):
        with pytest.raises(ValidationError):
            to_base(-1, buns)
        with pytest.raises(ValidationError):
            from_base(-1, buns)

    def test_cost_per_base_unit(self, buns, flour):
        assert cost_per_base_unit(24.0, buns) == pytest.approx(2.0)
        assert cost_per_base_unit(2.0, flour) == 2.0


class TestDescribe:
    def test_pack_description(self, buns):
        assert describe_pack_quantity(5, buns) == "5.0 packs = 60 pieces"

    def test_plain_material_has_no_description(self, flour):
        assert describe_pack_quantity(5, flour) is None
