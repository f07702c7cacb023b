"""
Core business logic services.

Layer-pure services that depend only on:
- stockledger/core/entities/*
- stockledger/core/interfaces/*
- stockledger/core/exceptions.py

NO infrastructure imports. The store is injected via constructor.
"""

from stockledger.core.services.movement_recorder import MovementRecorder
from stockledger.core.services.reports import (
    ConsumptionReport,
    ExpenseReport,
    LowStockReport,
    build_consumption_report,
    build_expense_report,
    build_low_stock_report,
    consumption_by_category,
    total_inventory_value,
    value_by_category,
)
from stockledger.core.services.stock_aggregator import (
    EntryBalance,
    StockLevelAggregator,
    allocate_fifo,
    build_stock_level,
    build_stock_levels,
)
from stockledger.core.services.unit_conversion import (
    PackInfo,
    cost_per_base_unit,
    describe_pack_quantity,
    from_base,
    pack_info,
    to_base,
)

__all__ = [
    # Unit conversion
    "PackInfo",
    "pack_info",
    "to_base",
    "from_base",
    "cost_per_base_unit",
    "describe_pack_quantity",
    # Aggregation
    "StockLevelAggregator",
    "EntryBalance",
    "allocate_fifo",
    "build_stock_level",
    "build_stock_levels",
    # Recording
    "MovementRecorder",
    # Reports
    "ConsumptionReport",
    "ExpenseReport",
    "LowStockReport",
    "build_consumption_report",
    "build_expense_report",
    "build_low_stock_report",
    "consumption_by_category",
    "value_by_category",
    "total_inventory_value",
]
