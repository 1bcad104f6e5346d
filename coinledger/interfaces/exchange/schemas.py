"""
Pydantic schemas for exchange API request/response validation.

These schemas enforce input validation and define the API contract.
Business rules (username rules, trade admissibility) are checked by
the use cases so that all failures can be reported together.
No business logic belongs here.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

COIN_DESCRIPTION = "Coin symbol (BTC or ETH)"
MAX_TRADE_AMOUNT = Decimal("1e15")


class ErrorResponse(BaseModel):
    """Standard error body.

    Attributes:
        error: Short error category.
        detail: Human-readable messages joined with line breaks.
        messages: Individual messages when several rules failed.
    """

    error: str
    detail: str | None = None
    messages: list[str] | None = None


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    storage: str


class SignUpRequest(BaseModel):
    """Request schema for account creation.

    Attributes:
        username: Desired username (rules are applied by the use case).
        password: Plaintext password.
        agreed: Whether the user agreement was accepted.
    """

    username: str = Field(..., max_length=256)
    password: str = Field(..., max_length=1024)
    agreed: bool = False


class SignUpResponse(BaseModel):
    username: str
    message: str


class SignInRequest(BaseModel):
    username: str = Field(..., max_length=256)
    password: str = Field(..., max_length=1024)


class MoneyItem(BaseModel):
    """An amount of one currency with its USD display string."""

    currency: str
    name: str
    amount: Decimal
    value_usd: Decimal
    display_value_usd: str


class DashboardResponse(BaseModel):
    """Response schema for the portfolio overview."""

    username: str
    holdings: list[MoneyItem]
    total_value_usd: Decimal
    display_total_value_usd: str
    notice: str | None = None


class QuoteResponse(BaseModel):
    coin: str
    price_usd: Decimal
    display_price_usd: str
    usd_balance: Decimal
    display_usd_balance: str


class PurchaseRequest(BaseModel):
    """Request schema for a buy.

    Amounts are parsed as decimals here; NaN, infinity and magnitudes
    above MAX_TRADE_AMOUNT are rejected.
    Range rules (non-negative, minimum, funds, slippage) are checked by
    the use case.

    Attributes:
        coin: Coin to buy.
        usd_amount: USD to spend.
        coin_amount: Coins expected in return.
    """

    coin: str = Field(..., min_length=1, max_length=16, description=COIN_DESCRIPTION)
    usd_amount: Decimal = Field(
        ..., allow_inf_nan=False, ge=-MAX_TRADE_AMOUNT, le=MAX_TRADE_AMOUNT
    )
    coin_amount: Decimal = Field(
        ..., allow_inf_nan=False, ge=-MAX_TRADE_AMOUNT, le=MAX_TRADE_AMOUNT
    )


class PurchaseResponse(BaseModel):
    coin: str
    usd_amount: Decimal
    coin_amount: Decimal
    price_usd: Decimal
    balances: dict[str, Decimal]
    message: str


class PricePointItem(BaseModel):
    date: date
    close_usd: Decimal


class PriceHistoryResponse(BaseModel):
    """Chart data: daily closes with the window's extremes."""

    points: list[PricePointItem]
    min_price: Decimal | None = None
    max_price: Decimal | None = None
