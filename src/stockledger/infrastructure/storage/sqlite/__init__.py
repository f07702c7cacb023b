"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
)
from stockledger.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore

LedgerStore = SQLiteLedgerStore


async def create_ledger_store(pool: ConnectionPool | None = None) -> SQLiteLedgerStore:
    """Build a ledger store on ``pool``, or on the global pool when omitted."""
    return SQLiteLedgerStore(pool or await get_pool())


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    # Store
    "SQLiteLedgerStore",
    "LedgerStore",
    "create_ledger_store",
]
