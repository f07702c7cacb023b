"""Storage infrastructure implementations."""

from stockledger.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteLedgerStore,
    close_pool,
    create_ledger_store,
    get_connection,
    get_pool,
)

__all__ = [
    "SQLiteLedgerStore",
    "create_ledger_store",
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
]
