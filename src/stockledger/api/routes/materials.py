"""Raw material catalog endpoints."""

from fastapi import APIRouter, Depends, Response, status

from stockledger.api.dependencies import (
    envelope,
    get_create_material_use_case,
    get_deactivate_material_use_case,
    get_entry_balances_use_case,
    get_list_materials_use_case,
    get_material_use_case,
    get_stock_level_use_case,
    get_update_material_use_case,
)
from stockledger.application.dto.requests import CreateMaterialRequest, UpdateMaterialRequest
from stockledger.application.dto.responses import ErrorResponse, OperationResult
from stockledger.application.use_cases import (
    CreateMaterialUseCase,
    DeactivateMaterialUseCase,
    GetEntryBalancesUseCase,
    GetMaterialUseCase,
    GetStockLevelUseCase,
    ListMaterialsUseCase,
    UpdateMaterialUseCase,
)
from stockledger.core.entities.material import MaterialCategory, RawMaterial
from stockledger.core.entities.stock import StockLevel
from stockledger.core.services.stock_aggregator import EntryBalance

router = APIRouter(prefix="/api/materials", tags=["materials"])

NOT_FOUND = {404: {"model": OperationResult[None]}}


@router.post(
    "",
    response_model=OperationResult[RawMaterial | None],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_material(
    request: CreateMaterialRequest,
    response: Response,
    use_case: CreateMaterialUseCase = Depends(get_create_material_use_case),
) -> OperationResult:
    """Add a raw material to the catalog."""
    return envelope(await use_case.run(request), response, status.HTTP_201_CREATED)


@router.get("", response_model=OperationResult[list[RawMaterial]])
async def list_materials(
    response: Response,
    category: MaterialCategory | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    use_case: ListMaterialsUseCase = Depends(get_list_materials_use_case),
) -> OperationResult:
    """List materials, optionally filtered by category, active flag or search text."""
    return envelope(await use_case.run(category, is_active, search), response)


@router.get("/{material_id}", response_model=OperationResult[RawMaterial | None], responses=NOT_FOUND)
async def get_material(
    material_id: str,
    response: Response,
    use_case: GetMaterialUseCase = Depends(get_material_use_case),
) -> OperationResult:
    return envelope(await use_case.run(material_id), response)


@router.patch("/{material_id}", response_model=OperationResult[RawMaterial | None], responses=NOT_FOUND)
async def update_material(
    material_id: str,
    request: UpdateMaterialRequest,
    response: Response,
    use_case: UpdateMaterialUseCase = Depends(get_update_material_use_case),
) -> OperationResult:
    """Update the fields present in the body."""
    return envelope(await use_case.run(material_id, request), response)


@router.delete("/{material_id}", response_model=OperationResult[bool], responses=NOT_FOUND)
async def deactivate_material(
    material_id: str,
    response: Response,
    use_case: DeactivateMaterialUseCase = Depends(get_deactivate_material_use_case),
) -> OperationResult:
    """Soft delete: the material is marked inactive and its history kept."""
    return envelope(await use_case.run(material_id), response)


@router.get("/{material_id}/stock-level", response_model=OperationResult[StockLevel | None])
async def get_material_stock_level(
    material_id: str,
    response: Response,
    use_case: GetStockLevelUseCase = Depends(get_stock_level_use_case),
) -> OperationResult:
    """Current stock level; ``data`` is null for unknown or inactive materials."""
    return envelope(await use_case.run(material_id), response)


@router.get("/{material_id}/balances", response_model=OperationResult[list[EntryBalance]])
async def get_entry_balances(
    material_id: str,
    response: Response,
    use_case: GetEntryBalancesUseCase = Depends(get_entry_balances_use_case),
) -> OperationResult:
    """Quantity left on each stock entry of the material, oldest first."""
    return envelope(await use_case.run(material_id), response)
