"""Stock ledger endpoints: levels, entries, movements and transfers."""

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status

from stockledger.api.dependencies import (
    envelope,
    get_create_entry_use_case,
    get_create_movement_use_case,
    get_delete_entry_use_case,
    get_entry_use_case,
    get_list_entries_use_case,
    get_list_movements_use_case,
    get_stock_level_use_case,
    get_stock_levels_use_case,
    get_transfer_use_case,
    get_update_entry_use_case,
)
from stockledger.application.dto.requests import (
    CreateStockEntryRequest,
    CreateStockMovementRequest,
    EntryQuery,
    MovementQuery,
    TransferStockRequest,
    UpdateStockEntryRequest,
)
from stockledger.application.dto.responses import OperationResult
from stockledger.application.use_cases import (
    CreateStockEntryUseCase,
    CreateStockMovementUseCase,
    DeleteStockEntryUseCase,
    GetCurrentStockLevelsUseCase,
    GetStockEntryUseCase,
    GetStockLevelUseCase,
    ListStockEntriesUseCase,
    ListStockMovementsUseCase,
    TransferStockUseCase,
    UpdateStockEntryUseCase,
)
from stockledger.core.entities.stock import MovementType, StockEntry, StockLevel, StockMovement

router = APIRouter(prefix="/api/stock", tags=["stock"])

FAILURES = {
    400: {"model": OperationResult[None]},
    404: {"model": OperationResult[None]},
    409: {"model": OperationResult[None]},
}


# --- Levels ---


@router.get("/levels", response_model=OperationResult[list[StockLevel]])
async def get_stock_levels(
    response: Response,
    low_stock_only: bool = False,
    use_case: GetCurrentStockLevelsUseCase = Depends(get_stock_levels_use_case),
) -> OperationResult:
    """Current stock level of every active material."""
    result = await use_case.run()
    if result.success and low_stock_only:
        result.data = [level for level in result.data if level.is_low_stock]
    return envelope(result, response)


@router.get("/levels/{material_id}", response_model=OperationResult[StockLevel | None])
async def get_stock_level(
    material_id: str,
    response: Response,
    use_case: GetStockLevelUseCase = Depends(get_stock_level_use_case),
) -> OperationResult:
    return envelope(await use_case.run(material_id), response)


# --- Entries ---


@router.post(
    "/entries",
    response_model=OperationResult[StockEntry | None],
    status_code=status.HTTP_201_CREATED,
    responses=FAILURES,
)
async def create_entry(
    request: CreateStockEntryRequest,
    response: Response,
    use_case: CreateStockEntryUseCase = Depends(get_create_entry_use_case),
) -> OperationResult:
    """Receive stock. Quantity and unit cost are in the material's declared unit."""
    return envelope(await use_case.run(request), response, status.HTTP_201_CREATED)


@router.get("/entries", response_model=OperationResult[list[StockEntry]])
async def list_entries(
    response: Response,
    raw_material_id: str | None = None,
    supplier: str | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    use_case: ListStockEntriesUseCase = Depends(get_list_entries_use_case),
) -> OperationResult:
    query = EntryQuery(
        raw_material_id=raw_material_id,
        supplier=supplier,
        from_date=from_date,
        to_date=to_date,
    )
    return envelope(await use_case.run(query), response)


@router.get("/entries/{entry_id}", response_model=OperationResult[StockEntry | None], responses=FAILURES)
async def get_entry(
    entry_id: str,
    response: Response,
    use_case: GetStockEntryUseCase = Depends(get_entry_use_case),
) -> OperationResult:
    return envelope(await use_case.run(entry_id), response)


@router.patch("/entries/{entry_id}", response_model=OperationResult[StockEntry | None], responses=FAILURES)
async def update_entry(
    entry_id: str,
    request: UpdateStockEntryRequest,
    response: Response,
    use_case: UpdateStockEntryUseCase = Depends(get_update_entry_use_case),
) -> OperationResult:
    """Corrective edit of an entry."""
    return envelope(await use_case.run(entry_id, request), response)


@router.delete("/entries/{entry_id}", response_model=OperationResult[bool], responses=FAILURES)
async def delete_entry(
    entry_id: str,
    response: Response,
    use_case: DeleteStockEntryUseCase = Depends(get_delete_entry_use_case),
) -> OperationResult:
    """Delete an entry; refused once other movements reference it."""
    return envelope(await use_case.run(entry_id), response)


# --- Movements ---


@router.post(
    "/movements",
    response_model=OperationResult[StockMovement | None],
    status_code=status.HTTP_201_CREATED,
    responses=FAILURES,
)
async def create_movement(
    request: CreateStockMovementRequest,
    response: Response,
    use_case: CreateStockMovementUseCase = Depends(get_create_movement_use_case),
) -> OperationResult:
    return envelope(await use_case.run(request), response, status.HTTP_201_CREATED)


@router.get("/movements", response_model=OperationResult[list[StockMovement]])
async def list_movements(
    response: Response,
    stock_entry_id: str | None = None,
    type: MovementType | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    section_id: str | None = None,
    raw_material_id: str | None = None,
    use_case: ListStockMovementsUseCase = Depends(get_list_movements_use_case),
) -> OperationResult:
    query = MovementQuery(
        stock_entry_id=stock_entry_id,
        type=type,
        from_date=from_date,
        to_date=to_date,
        section_id=section_id,
        raw_material_id=raw_material_id,
    )
    return envelope(await use_case.run(query), response)


@router.post("/transfer", response_model=OperationResult[bool], responses=FAILURES)
async def transfer_stock(
    request: TransferStockRequest,
    response: Response,
    use_case: TransferStockUseCase = Depends(get_transfer_use_case),
) -> OperationResult:
    """Move stock into a section."""
    return envelope(await use_case.run(request), response)
