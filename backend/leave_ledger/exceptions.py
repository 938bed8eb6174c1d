from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from leave_ledger.models.enums import LedgerErrorCode

if TYPE_CHECKING:
    from leave_ledger.services.ledger import LedgerError


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error = error or type(self).__name__
        super().__init__(self.message)


_LEDGER_ERROR_STATUS: dict[LedgerErrorCode, int] = {
    LedgerErrorCode.POLICY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LedgerErrorCode.BALANCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LedgerErrorCode.UNKNOWN_LEAVE_CATEGORY: status.HTTP_400_BAD_REQUEST,
    LedgerErrorCode.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    LedgerErrorCode.INSUFFICIENT_BALANCE: status.HTTP_400_BAD_REQUEST,
    LedgerErrorCode.BALANCE_EXISTS: status.HTTP_409_CONFLICT,
    LedgerErrorCode.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    LedgerErrorCode.CORRUPT_RECORD: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def ledger_error_to_app_error(error: LedgerError) -> AppError:
    """Translate a ledger failure into an HTTP-facing AppError."""
    return AppError(error.message, status_code=_LEDGER_ERROR_STATUS[error.code], error=error.code.value)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
