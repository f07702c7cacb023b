"""Unit tests for section entities."""

import pytest
from pydantic import ValidationError

from stockledger.core.entities.section import (
    ConsumptionSource,
    Section,
    SectionConsumption,
    SectionInventory,
    SectionType,
)


class TestSection:
    def test_defaults(self):
        section = Section(name="Pastry")
        assert section.type == SectionType.OTHER
        assert section.is_active is True
        assert section.manager_id is None


class TestSectionInventory:
    def test_available_excludes_reserved(self):
        row = SectionInventory(section_id="s1", raw_material_id="m1", quantity=10, reserved_quantity=3)
        assert row.available_quantity == 7

    def test_quantity_cannot_go_negative(self):
        with pytest.raises(ValidationError):
            SectionInventory(section_id="s1", raw_material_id="m1", quantity=-1)


class TestSectionConsumption:
    def test_defaults_to_manual_source(self):
        consumption = SectionConsumption(
            section_id="s1", raw_material_id="m1", quantity=2, consumed_by="chef", reason="prep"
        )
        assert consumption.source == ConsumptionSource.MANUAL
        assert consumption.order_id is None

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            SectionConsumption(
                section_id="s1", raw_material_id="m1", quantity=0, consumed_by="chef", reason="prep"
            )
