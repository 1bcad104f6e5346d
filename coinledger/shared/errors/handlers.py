"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from coinledger.core.config import settings
from coinledger.domain.exchange.errors import (
    MESSAGE_SEPARATOR,
    AccountNotFoundError,
    ConcurrentUpdateError,
    ExchangeDomainError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PriceFetchError,
    StorageUnavailableError,
    UnsupportedCurrencyError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_502 = 502
HTTP_503 = 503


def _error_response(
    status_code: int,
    error: str,
    detail: str | None = None,
    messages: list[str] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, object] = {"error": error}
    if messages:
        body["messages"] = messages
        body["detail"] = MESSAGE_SEPARATOR.join(messages)
    elif detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ValidationFailedError)
    async def handle_validation_failed(
        _request: Request, exc: ValidationFailedError
    ) -> JSONResponse:
        """Report every failing rule together."""
        return _error_response(HTTP_422, "Validation failed", messages=exc.messages)

    @app.exception_handler(NotAuthenticatedError)
    async def handle_not_authenticated(
        _request: Request, exc: NotAuthenticatedError
    ) -> JSONResponse:
        """Send the client back to sign-in and drop its session cookie."""
        response = _error_response(HTTP_401, "Not authenticated", detail=exc.message)
        response.delete_cookie(settings.session_cookie_name)
        return response

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(
        _request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        return _error_response(HTTP_401, "Invalid credentials", detail=exc.message)

    @app.exception_handler(InsufficientFundsError)
    async def handle_insufficient_funds(
        _request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        """Handle insufficient funds errors."""
        logger.warning("Insufficient %s funds", exc.currency)
        return _error_response(HTTP_400, "Insufficient funds")

    @app.exception_handler(InvalidAmountError)
    async def handle_invalid_amount(
        _request: Request, exc: InvalidAmountError
    ) -> JSONResponse:
        return _error_response(HTTP_400, "Invalid amount")

    @app.exception_handler(UnsupportedCurrencyError)
    async def handle_unsupported_currency(
        _request: Request, exc: UnsupportedCurrencyError
    ) -> JSONResponse:
        logger.warning("Unsupported currency: %s", exc.symbol)
        return _error_response(HTTP_422, "Unsupported currency", detail=exc.message)

    @app.exception_handler(AccountNotFoundError)
    async def handle_account_not_found(
        _request: Request, exc: AccountNotFoundError
    ) -> JSONResponse:
        logger.warning("Session refers to missing account: %s", exc.username)
        return _error_response(HTTP_404, "Account not found")

    @app.exception_handler(ConcurrentUpdateError)
    async def handle_concurrent_update(
        _request: Request, exc: ConcurrentUpdateError
    ) -> JSONResponse:
        """A newer write won; the client should reload and retry."""
        logger.warning("Concurrent update of account %s", exc.username)
        return _error_response(
            HTTP_409, "Conflict", detail="Your account changed. Please try again."
        )

    @app.exception_handler(PriceFetchError)
    async def handle_price_fetch(
        _request: Request, exc: PriceFetchError
    ) -> JSONResponse:
        logger.error("Market data unavailable: %s", exc.reason)
        return _error_response(HTTP_502, "Market data unavailable")

    @app.exception_handler(StorageUnavailableError)
    async def handle_storage_unavailable(
        _request: Request, exc: StorageUnavailableError
    ) -> JSONResponse:
        """Storage failures abort the request and are not retried."""
        logger.error("Storage unavailable: %s", exc.reason)
        return _error_response(HTTP_503, "Service unavailable")

    @app.exception_handler(ExchangeDomainError)
    async def handle_exchange_domain(
        _request: Request, exc: ExchangeDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled exchange domain errors."""
        logger.error("Unhandled exchange domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
