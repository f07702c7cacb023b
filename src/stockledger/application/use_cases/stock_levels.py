"""Stock level queries."""

from stockledger.application.use_cases.base import LedgerUseCase
from stockledger.core.entities.stock import StockLevel
from stockledger.core.services.stock_aggregator import EntryBalance, StockLevelAggregator


class GetCurrentStockLevelsUseCase(LedgerUseCase):
    """Stock levels for every active material."""

    failure_data: list = []

    async def execute(self) -> list[StockLevel]:
        return await StockLevelAggregator(await self._get_store()).current_levels()


class GetStockLevelUseCase(LedgerUseCase):
    """Stock level for one material; None when it is missing or inactive."""

    async def execute(self, material_id: str) -> StockLevel | None:
        return await StockLevelAggregator(await self._get_store()).level_for(material_id)


class GetEntryBalancesUseCase(LedgerUseCase):
    """Remaining quantity on each of a material's entries, oldest first."""

    failure_data: list = []

    async def execute(self, material_id: str) -> list[EntryBalance]:
        return await StockLevelAggregator(await self._get_store()).entry_balances(material_id)
