"""
Domain entities for the exchange bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from coinledger.domain.exchange.errors import UnsupportedCurrencyError


class Currency(Enum):
    """Denominations an account can hold."""

    BTC = "BTC"
    ETH = "ETH"
    USD = "USD"

    @property
    def display_name(self) -> str:
        return CURRENCY_NAMES[self]

    @classmethod
    def parse(cls, symbol: str) -> "Currency":
        """Return the currency for a symbol, case-insensitively.

        Raises:
            UnsupportedCurrencyError: If the symbol is unknown.
        """
        try:
            return cls(symbol.strip().upper())
        except (ValueError, AttributeError):
            raise UnsupportedCurrencyError(str(symbol)) from None


CURRENCY_NAMES = {
    Currency.BTC: "Bitcoin",
    Currency.ETH: "Ether",
    Currency.USD: "US Dollars",
}

TRADABLE_COINS = (Currency.BTC, Currency.ETH)


def empty_balances() -> dict[Currency, Decimal]:
    """Return a zero balance for every currency."""
    return {currency: Decimal("0") for currency in Currency}


@dataclass(frozen=True)
class TradeRecord:
    """A single executed buy, appended to an account's transaction log."""

    coin: Currency
    usd_amount: Decimal
    coin_amount: Decimal
    price_usd: Decimal
    executed_at: datetime


@dataclass
class Account:
    """A user's account: credentials, balances and trade history.

    ``version`` increases by one on every committed update and is used
    for optimistic concurrency control by the account store.
    """

    username: str
    password_hash: str
    created_at: datetime
    is_new_account: bool = True
    balances: dict[Currency, Decimal] = field(default_factory=empty_balances)
    transactions: list[TradeRecord] = field(default_factory=list)
    version: int = 0

    def balance(self, currency: Currency) -> Decimal:
        return self.balances.get(currency, Decimal("0"))


@dataclass
class Session:
    """Per-browser session state.

    A session without a username is signed out.
    """

    token: str
    username: Optional[str] = None
    last_activity_at: Optional[datetime] = None

    @property
    def is_signed_in(self) -> bool:
        return self.username is not None


@dataclass(frozen=True)
class PricePoint:
    """Daily closing price of BTC in USD."""

    date: date
    close_usd: Decimal
