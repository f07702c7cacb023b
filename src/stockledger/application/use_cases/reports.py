"""Report use cases.

Load the slice of the ledger a report needs and hand it to the pure
builders in ``stockledger.core.services.reports``.
"""

from datetime import UTC, datetime, timedelta

from stockledger.application.dto.requests import ReportQuery
from stockledger.application.dto.responses import InventoryValueResponse
from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.config import get_settings
from stockledger.config.settings import InventorySettings
from stockledger.core.interfaces.ledger_store import ILedgerStore
from stockledger.core.services.reports import (
    ConsumptionReport,
    ExpenseReport,
    LowStockReport,
    build_consumption_report,
    build_expense_report,
    build_low_stock_report,
    total_inventory_value,
    value_by_category,
)
from stockledger.core.services.stock_aggregator import StockLevelAggregator
from stockledger.core.services.unit_conversion import cost_per_base_unit


class ReportUseCase(LedgerUseCase):
    def __init__(
        self,
        store: ILedgerStore | None = None,
        settings: InventorySettings | None = None,
    ):
        super().__init__(store)
        self._settings = settings or get_settings().inventory

    def _window(self, query: ReportQuery) -> tuple[datetime, datetime]:
        to_date = query.to_date or datetime.now(UTC)
        from_date = query.from_date or to_date - timedelta(days=self._settings.report_window_days)
        return from_date, to_date


class ConsumptionReportUseCase(ReportUseCase):
    """Consumption, waste and top materials over a date window."""

    async def execute(self, query: ReportQuery | None = None) -> ConsumptionReport:
        query = query or ReportQuery()
        from_date, to_date = self._window(query)
        store = await self._get_store()

        movements = await store.list_movements(
            from_date=from_date, to_date=to_date, section_id=query.section_id
        )
        entries = await store.list_entries()
        materials = await store.list_materials()

        return build_consumption_report(
            movements,
            entries,
            materials,
            section_id=query.section_id,
            top_n=query.top_n or self._settings.consumption_top_n,
            from_date=from_date,
            to_date=to_date,
        )


class ExpenseReportUseCase(ReportUseCase):
    """Purchase spending over a date window."""

    async def execute(self, query: ReportQuery | None = None) -> ExpenseReport:
        query = query or ReportQuery()
        from_date, to_date = self._window(query)
        store = await self._get_store()

        entries = await store.list_entries(from_date=from_date, to_date=to_date)
        materials = await store.list_materials()

        return build_expense_report(
            entries,
            materials,
            top_n=query.top_n or self._settings.expense_top_n,
        )


class LowStockReportUseCase(ReportUseCase):
    async def execute(self) -> LowStockReport:
        levels = await StockLevelAggregator(await self._get_store()).current_levels()
        return build_low_stock_report(levels, self._settings.low_stock_warning_ratio)


class InventoryValueUseCase(ReportUseCase):
    """Value of available stock, per category and in total."""

    async def execute(self) -> InventoryValueResponse:
        levels = await StockLevelAggregator(await self._get_store()).current_levels()
        allocated = sum(
            level.allocated_quantity * cost_per_base_unit(level.raw_material.unit_cost, level.raw_material)
            for level in levels
            if level.raw_material is not None
        )
        return InventoryValueResponse(
            total_value=total_inventory_value(levels),
            by_category=value_by_category(levels),
            material_count=len(levels),
            low_stock_count=sum(1 for level in levels if level.is_low_stock),
            allocated_value=allocated,
        )
