"""Section endpoints: catalog, allocation and consumption."""

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status

from stockledger.api.dependencies import (
    envelope,
    get_assign_use_case,
    get_consumption_use_case,
    get_create_section_use_case,
    get_deactivate_section_use_case,
    get_list_consumption_use_case,
    get_list_sections_use_case,
    get_remove_section_inventory_use_case,
    get_section_inventory_use_case,
    get_section_use_case,
    get_update_section_inventory_use_case,
    get_update_section_use_case,
)
from stockledger.application.dto.requests import (
    AssignStockBody,
    AssignStockRequest,
    ConsumptionQuery,
    CreateSectionRequest,
    RecordConsumptionBody,
    RecordConsumptionRequest,
    RemoveSectionInventoryRequest,
    UpdateSectionInventoryRequest,
    UpdateSectionRequest,
)
from stockledger.application.dto.responses import OperationResult
from stockledger.application.use_cases import (
    AssignStockToSectionUseCase,
    CreateSectionUseCase,
    DeactivateSectionUseCase,
    GetSectionInventoryUseCase,
    GetSectionUseCase,
    ListSectionConsumptionUseCase,
    ListSectionsUseCase,
    RecordConsumptionUseCase,
    RemoveSectionInventoryUseCase,
    UpdateSectionInventoryUseCase,
    UpdateSectionUseCase,
)
from stockledger.core.entities.section import (
    ConsumptionSource,
    Section,
    SectionConsumption,
    SectionInventory,
    SectionStockLevel,
    SectionType,
)

router = APIRouter(prefix="/api/sections", tags=["sections"])

FAILURES = {
    400: {"model": OperationResult[None]},
    404: {"model": OperationResult[None]},
    409: {"model": OperationResult[None]},
}


@router.post(
    "",
    response_model=OperationResult[Section | None],
    status_code=status.HTTP_201_CREATED,
)
async def create_section(
    request: CreateSectionRequest,
    response: Response,
    use_case: CreateSectionUseCase = Depends(get_create_section_use_case),
) -> OperationResult:
    return envelope(await use_case.run(request), response, status.HTTP_201_CREATED)


@router.get("", response_model=OperationResult[list[Section]])
async def list_sections(
    response: Response,
    type: SectionType | None = None,
    is_active: bool | None = None,
    manager_id: str | None = None,
    search: str | None = None,
    use_case: ListSectionsUseCase = Depends(get_list_sections_use_case),
) -> OperationResult:
    return envelope(await use_case.run(type, is_active, manager_id, search), response)


@router.put(
    "/inventory/{inventory_id}",
    response_model=OperationResult[SectionInventory | None],
    responses=FAILURES,
)
async def update_section_inventory(
    inventory_id: str,
    request: UpdateSectionInventoryRequest,
    response: Response,
    use_case: UpdateSectionInventoryUseCase = Depends(get_update_section_inventory_use_case),
) -> OperationResult:
    """Set a section allocation; increases must fit in central stock."""
    return envelope(await use_case.run(inventory_id, request), response)


@router.delete("/inventory/{inventory_id}", response_model=OperationResult[bool], responses=FAILURES)
async def remove_section_inventory(
    inventory_id: str,
    removed_by: str,
    response: Response,
    notes: str | None = None,
    use_case: RemoveSectionInventoryUseCase = Depends(get_remove_section_inventory_use_case),
) -> OperationResult:
    request = RemoveSectionInventoryRequest(removed_by=removed_by, notes=notes)
    return envelope(await use_case.run(inventory_id, request), response)


@router.get("/{section_id}", response_model=OperationResult[Section | None], responses=FAILURES)
async def get_section(
    section_id: str,
    response: Response,
    use_case: GetSectionUseCase = Depends(get_section_use_case),
) -> OperationResult:
    return envelope(await use_case.run(section_id), response)


@router.patch("/{section_id}", response_model=OperationResult[Section | None], responses=FAILURES)
async def update_section(
    section_id: str,
    request: UpdateSectionRequest,
    response: Response,
    use_case: UpdateSectionUseCase = Depends(get_update_section_use_case),
) -> OperationResult:
    return envelope(await use_case.run(section_id, request), response)


@router.delete("/{section_id}", response_model=OperationResult[bool], responses=FAILURES)
async def deactivate_section(
    section_id: str,
    response: Response,
    use_case: DeactivateSectionUseCase = Depends(get_deactivate_section_use_case),
) -> OperationResult:
    """Soft delete a section."""
    return envelope(await use_case.run(section_id), response)


@router.get(
    "/{section_id}/inventory",
    response_model=OperationResult[list[SectionStockLevel]],
    responses=FAILURES,
)
async def get_section_inventory(
    section_id: str,
    response: Response,
    use_case: GetSectionInventoryUseCase = Depends(get_section_inventory_use_case),
) -> OperationResult:
    """Stock held by the section, one row per material."""
    return envelope(await use_case.run(section_id), response)


@router.post("/{section_id}/assign", response_model=OperationResult[bool], responses=FAILURES)
async def assign_stock(
    section_id: str,
    body: AssignStockBody,
    response: Response,
    use_case: AssignStockToSectionUseCase = Depends(get_assign_use_case),
) -> OperationResult:
    """Allocate central stock to the section."""
    request = AssignStockRequest(section_id=section_id, **body.model_dump())
    return envelope(await use_case.run(request), response)


@router.post("/{section_id}/consume", response_model=OperationResult[bool], responses=FAILURES)
async def record_consumption(
    section_id: str,
    body: RecordConsumptionBody,
    response: Response,
    use_case: RecordConsumptionUseCase = Depends(get_consumption_use_case),
) -> OperationResult:
    """Record stock used up in the section."""
    request = RecordConsumptionRequest(section_id=section_id, **body.model_dump())
    return envelope(await use_case.run(request), response)


@router.get("/{section_id}/consumption", response_model=OperationResult[list[SectionConsumption]])
async def list_section_consumption(
    section_id: str,
    response: Response,
    raw_material_id: str | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    source: ConsumptionSource | None = None,
    use_case: ListSectionConsumptionUseCase = Depends(get_list_consumption_use_case),
) -> OperationResult:
    query = ConsumptionQuery(
        section_id=section_id,
        raw_material_id=raw_material_id,
        from_date=from_date,
        to_date=to_date,
        source=source,
    )
    return envelope(await use_case.run(query), response)
