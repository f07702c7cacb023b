"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from stockledger.application.dto.responses import ErrorResponse
from stockledger.config import get_logger
from stockledger.core.exceptions import (
    ConfigurationError,
    EntryInUseError,
    InsufficientStockError,
    NotFoundError,
    StockLedgerError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    EntryInUseError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

# Same mapping keyed by error code, for failed result envelopes
ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "MATERIAL_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SECTION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "STOCK_ENTRY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SECTION_INVENTORY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INSUFFICIENT_STOCK": status.HTTP_409_CONFLICT,
    "ENTRY_IN_USE": status.HTTP_409_CONFLICT,
    "DATABASE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Hint messages per error code / exception type
HINT_MAP: dict[str, str] = {
    "MATERIAL_NOT_FOUND": "Check the material ID and try GET /api/materials to list materials.",
    "SECTION_NOT_FOUND": "Check the section ID and try GET /api/sections to list sections.",
    "STOCK_ENTRY_NOT_FOUND": "Check the entry ID and try GET /api/stock/entries to list entries.",
    "SECTION_INVENTORY_NOT_FOUND": "Check the inventory ID with GET /api/sections/{id}/inventory.",
    "INSUFFICIENT_STOCK": "Check GET /api/stock/levels for the quantity currently available.",
    "ENTRY_IN_USE": "Entries with recorded movements cannot be deleted; correct them instead.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
    "ValueError": "A parameter value is invalid. Check the request.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The request conflicts with the current ledger state.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
}


def get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def status_for_error_code(error_code: str | None) -> int:
    if error_code is None:
        return status.HTTP_400_BAD_REQUEST
    return ERROR_CODE_STATUS.get(error_code, status.HTTP_400_BAD_REQUEST)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions to standardized JSON error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Handle request with error catching."""
        try:
            return await call_next(request)

        except Exception as e:
            return self._handle_exception(request, e)

    def _handle_exception(
        self,
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Convert exception to standardized JSON response."""
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        for exc_type, code in EXCEPTION_STATUS_MAP.items():
            if isinstance(exc, exc_type):
                status_code = code
                break

        if isinstance(exc, StockLedgerError):
            error_code = exc.code
        else:
            error_code = exc.__class__.__name__

        request_id = getattr(request.state, "request_id", None)

        logger.error(
            "unhandled_exception",
            request_id=request_id,
            path=request.url.path,
            error_type=error_code,
            error=str(exc),
            traceback=traceback.format_exc() if status_code >= 500 else None,
        )

        error_response = ErrorResponse(
            error_code=error_code,
            message=str(exc),
            hint=get_hint(error_code, status_code),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status_code,
            content=error_response.model_dump(mode="json"),
        )


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(StockLedgerError)
    async def ledger_exception_handler(
        request: Request,
        exc: StockLedgerError,
    ) -> JSONResponse:
        """Handle domain errors that escape a route."""
        status_code = status_for_error_code(exc.code)
        if isinstance(exc, StorageError):
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error_code=exc.code,
                message=exc.message,
                hint=get_hint(exc.code, status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = {
            400: "BAD_REQUEST",
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            422: "UNPROCESSABLE_ENTITY",
        }.get(exc.status_code, "HTTP_ERROR")

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=exc.detail or "An error occurred",
                hint=get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
        )
