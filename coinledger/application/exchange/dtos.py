"""
Data Transfer Objects for the exchange application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior. Sessions travel inside
commands and queries explicitly; use cases update them in place.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from coinledger.domain.exchange.entities import Currency, PricePoint, Session


@dataclass(frozen=True)
class SignUpCommand:
    """Input DTO for creating an account.

    Attributes:
        username: Requested username, stripped before validation.
        password: Plaintext password. Never stored.
        agreement_accepted: Whether the user agreement was accepted.
        session: The caller's current session, signed out on success.
    """

    username: str
    password: str
    agreement_accepted: bool
    session: Optional[Session] = None


@dataclass(frozen=True)
class SignUpResult:
    username: str
    message: str


@dataclass(frozen=True)
class SignInCommand:
    """Input DTO for authenticating.

    Attributes:
        session: The caller's current session, signed in on success.
        username: Username, stripped before lookup.
        password: Plaintext password to verify.
    """

    session: Session
    username: str
    password: str


@dataclass(frozen=True)
class SignInResult:
    session: Session
    message: str


@dataclass(frozen=True)
class SignOutCommand:
    session: Session


@dataclass(frozen=True)
class ViewDashboardQuery:
    session: Session


@dataclass(frozen=True)
class DashboardResult:
    """Output DTO for the portfolio overview.

    Attributes:
        username: Signed-in username.
        balances: Amount held per currency.
        counter_values: USD value of one unit of each currency.
        total_value_usd: Sum of every balance valued in USD.
        bonus_notice: One-time signup bonus notice, None after the first view.
    """

    username: str
    balances: dict[Currency, Decimal]
    counter_values: dict[Currency, Decimal]
    total_value_usd: Decimal
    bonus_notice: Optional[str] = None


@dataclass(frozen=True)
class GetQuoteQuery:
    session: Session
    coin: str


@dataclass(frozen=True)
class QuoteResult:
    """Output DTO for the buy form: live price and spendable USD."""

    coin: Currency
    price_usd: Decimal
    usd_balance: Decimal


@dataclass(frozen=True)
class PurchaseCommand:
    """Input DTO for a buy.

    Attributes:
        session: The caller's current session.
        coin: Coin symbol as submitted; parsed once the session is checked.
        usd_amount: USD the client offers to spend.
        coin_amount: Coins the client expects to receive.
    """

    session: Session
    coin: str
    usd_amount: Decimal
    coin_amount: Decimal


@dataclass(frozen=True)
class PurchaseResult:
    coin: Currency
    usd_amount: Decimal
    coin_amount: Decimal
    price_usd: Decimal
    balances: dict[Currency, Decimal]
    message: str


@dataclass(frozen=True)
class GetPriceHistoryQuery:
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class PriceHistoryResult:
    """Output DTO for chart data.

    Attributes:
        points: Daily closes ordered by date.
        min_price: Lowest close in the window, None if empty.
        max_price: Highest close in the window, None if empty.
    """

    points: list[PricePoint]
    min_price: Optional[Decimal]
    max_price: Optional[Decimal]
