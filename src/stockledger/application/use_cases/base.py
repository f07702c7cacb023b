"""Shared plumbing for ledger use cases."""

import copy
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stockledger.application.dto.responses import OperationResult
from stockledger.config import get_logger
from stockledger.core.exceptions import StockLedgerError, StorageError, ValidationError
from stockledger.core.interfaces.ledger_store import ILedgerStore

logger = get_logger(__name__)


def validation_error_from_pydantic(error: PydanticValidationError) -> ValidationError:
    """Collapse a pydantic error into the domain ValidationError (first problem wins)."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return ValidationError(field, first.get("msg", str(error)), first.get("input"))


class LedgerUseCase:
    """
    Base class for use cases over the ledger store.

    ``execute()`` returns the result or raises a domain error.
    ``run()`` wraps ``execute()`` in an ``OperationResult`` and never raises
    for domain or storage failures; on failure ``data`` is a copy of
    ``failure_data``.
    """

    failure_data: Any = None

    def __init__(self, store: ILedgerStore | None = None):
        self._store = store

    async def _get_store(self) -> ILedgerStore:
        if self._store is None:
            from stockledger.infrastructure.storage.sqlite import create_ledger_store

            self._store = await create_ledger_store()
        return self._store

    async def execute(self, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError

    def present(self, result: Any) -> Any:
        """Shape the ``execute()`` result for the envelope."""
        return result

    async def run(self, *args: Any, **kwargs: Any) -> OperationResult:
        name = type(self).__name__
        try:
            result = await self.execute(*args, **kwargs)
        except PydanticValidationError as e:
            error: StockLedgerError = validation_error_from_pydantic(e)
        except StockLedgerError as e:
            error = e
        else:
            return OperationResult.ok(self.present(result))

        if isinstance(error, StorageError):
            logger.error("use_case_failed", use_case=name, error_code=error.code, message=error.message)
        else:
            logger.warning("use_case_rejected", use_case=name, error_code=error.code, message=error.message)
        return OperationResult.fail(error, copy.copy(self.failure_data))
