"""Raw material catalog use cases."""

from stockledger.application.dto.requests import CreateMaterialRequest, UpdateMaterialRequest
from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.config import get_logger
from stockledger.core.entities.material import PACK_UNITS, MaterialCategory, RawMaterial
from stockledger.core.exceptions import MaterialNotFoundError

logger = get_logger(__name__)


def _strip_pack_fields(data: dict) -> dict:
    """Pack breakdown only applies to PACKS and BOXES."""
    if data.get("unit") not in PACK_UNITS:
        data["units_per_pack"] = None
        data["base_unit"] = None
    return data


class CreateMaterialUseCase(LedgerUseCase):
    async def execute(self, request: CreateMaterialRequest) -> RawMaterial:
        material = RawMaterial(**_strip_pack_fields(request.model_dump()))
        return await (await self._get_store()).create_material(material)


class ListMaterialsUseCase(LedgerUseCase):
    """List materials filtered by category, active flag and free-text search."""

    failure_data: list = []

    async def execute(
        self,
        category: MaterialCategory | None = None,
        is_active: bool | None = None,
        search: str | None = None,
    ) -> list[RawMaterial]:
        store = await self._get_store()
        return await store.list_materials(category=category, is_active=is_active, search=search)


class GetMaterialUseCase(LedgerUseCase):
    async def execute(self, material_id: str) -> RawMaterial:
        material = await (await self._get_store()).get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material


class UpdateMaterialUseCase(LedgerUseCase):
    """
    Apply a partial update.

    The merged record is validated as a whole, so a change to
    ``min_stock_level`` alone still has to stay below ``max_stock_level``.
    """

    async def execute(self, material_id: str, request: UpdateMaterialRequest) -> RawMaterial:
        store = await self._get_store()
        material = await store.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)

        merged = material.model_dump()
        merged.update(request.model_dump(exclude_unset=True))
        updated = RawMaterial.model_validate(_strip_pack_fields(merged))
        return await store.update_material(updated)


class DeactivateMaterialUseCase(LedgerUseCase):
    """Soft delete: the material and its ledger history stay on record."""

    failure_data = False

    async def execute(self, material_id: str) -> bool:
        store = await self._get_store()
        material = await store.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        if material.is_active:
            material.is_active = False
            await store.update_material(material)
            logger.info("material_deactivated", material_id=material_id)
        return True
