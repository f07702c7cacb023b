"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.ledger_store import ILedgerStore

__all__ = ["ILedgerStore"]
