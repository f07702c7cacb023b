"""Report endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response

from stockledger.api.dependencies import (
    envelope,
    get_consumption_report_use_case,
    get_expense_report_use_case,
    get_inventory_value_use_case,
    get_low_stock_report_use_case,
)
from stockledger.application.dto.requests import ReportQuery
from stockledger.application.dto.responses import InventoryValueResponse, OperationResult
from stockledger.application.use_cases import (
    ConsumptionReportUseCase,
    ExpenseReportUseCase,
    InventoryValueUseCase,
    LowStockReportUseCase,
)
from stockledger.core.services.reports import ConsumptionReport, ExpenseReport, LowStockReport

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/consumption", response_model=OperationResult[ConsumptionReport | None])
async def consumption_report(
    response: Response,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    section_id: str | None = None,
    top_n: int | None = Query(default=None, ge=1, le=100),
    use_case: ConsumptionReportUseCase = Depends(get_consumption_report_use_case),
) -> OperationResult:
    """Consumption and waste over a window (default: the configured number of days)."""
    query = ReportQuery(from_date=from_date, to_date=to_date, section_id=section_id, top_n=top_n)
    return envelope(await use_case.run(query), response)


@router.get("/expenses", response_model=OperationResult[ExpenseReport | None])
async def expense_report(
    response: Response,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    top_n: int | None = Query(default=None, ge=1, le=100),
    use_case: ExpenseReportUseCase = Depends(get_expense_report_use_case),
) -> OperationResult:
    """Purchase spending, per-material cost analysis and supplier ranking."""
    query = ReportQuery(from_date=from_date, to_date=to_date, top_n=top_n)
    return envelope(await use_case.run(query), response)


@router.get("/low-stock", response_model=OperationResult[LowStockReport | None])
async def low_stock_report(
    response: Response,
    use_case: LowStockReportUseCase = Depends(get_low_stock_report_use_case),
) -> OperationResult:
    """Low-stock materials bucketed into critical, warning and low."""
    return envelope(await use_case.run(), response)


@router.get("/inventory-value", response_model=OperationResult[InventoryValueResponse | None])
async def inventory_value(
    response: Response,
    use_case: InventoryValueUseCase = Depends(get_inventory_value_use_case),
) -> OperationResult:
    return envelope(await use_case.run(), response)
