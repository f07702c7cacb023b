"""
Pack/box unit conversion.

The ledger stores every quantity in the material's base unit. Materials
bought in packs or boxes declare how many base units one pack holds;
every other unit is its own base unit.
"""

from dataclasses import dataclass

from stockledger.core.entities.material import MeasurementUnit, RawMaterial
from stockledger.core.exceptions import ValidationError

DEFAULT_BASE_UNIT = MeasurementUnit.PIECES


@dataclass(frozen=True)
class PackInfo:
    """How a pack or box breaks down into base units."""

    units_per_pack: float
    base_unit: MeasurementUnit
    pack_unit: MeasurementUnit


def pack_info(material: RawMaterial) -> PackInfo | None:
    """Return pack details for PACKS/BOXES materials, None otherwise."""
    if not material.is_pack_unit:
        return None

    units_per_pack = material.units_per_pack or 1.0
    if units_per_pack <= 0:
        units_per_pack = 1.0

    return PackInfo(
        units_per_pack=units_per_pack,
        base_unit=material.base_unit or DEFAULT_BASE_UNIT,
        pack_unit=material.unit,
    )


def _check_quantity(quantity: float) -> None:
    if quantity < 0:
        raise ValidationError("quantity", "must not be negative", quantity)


def to_base(quantity: float, material: RawMaterial) -> float:
    """Convert a quantity in the declared unit to base units."""
    _check_quantity(quantity)
    info = pack_info(material)
    if info is None:
        return quantity
    return quantity * info.units_per_pack


def from_base(quantity: float, material: RawMaterial) -> float:
    """Convert a base-unit quantity back to the declared unit."""
    _check_quantity(quantity)
    info = pack_info(material)
    if info is None:
        return quantity
    return quantity / info.units_per_pack


def cost_per_base_unit(unit_cost: float, material: RawMaterial) -> float:
    """Price of one base unit given the price of one declared unit."""
    info = pack_info(material)
    if info is None:
        return unit_cost
    return unit_cost / info.units_per_pack


def describe_pack_quantity(quantity: float, material: RawMaterial) -> str | None:
    """
    Human readable breakdown such as ``"5.0 packs = 60 pieces"``.

    Returns None for materials that are not bought in packs.
    """
    info = pack_info(material)
    if info is None:
        return None
    base = to_base(quantity, material)
    return f"{quantity:.1f} {info.pack_unit.value} = {base:g} {info.base_unit.value}"
