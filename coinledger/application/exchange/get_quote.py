"""
Use case: Quote a coin for the buy form.

Input: GetQuoteQuery (session, coin)
Output: QuoteResult
Side effects: Refreshes the session.
Failure cases: NotAuthenticatedError, UnsupportedCurrencyError,
    AccountNotFoundError.
"""

from coinledger.application.exchange.dtos import GetQuoteQuery, QuoteResult
from coinledger.application.exchange.pricing import FallbackPriceSource
from coinledger.application.exchange.session_gate import SessionGate
from coinledger.domain.exchange.entities import TRADABLE_COINS, Currency
from coinledger.domain.exchange.errors import (
    AccountNotFoundError,
    UnsupportedCurrencyError,
)
from coinledger.domain.exchange.ports import AccountRepository


class GetQuoteUseCase:
    """Returns the live price of a coin and the user's spendable USD."""

    def __init__(
        self,
        account_repo: AccountRepository,
        session_gate: SessionGate,
        price_source: FallbackPriceSource,
    ) -> None:
        self._account_repo = account_repo
        self._session_gate = session_gate
        self._price_source = price_source

    def execute(self, query: GetQuoteQuery) -> QuoteResult:
        username = self._session_gate.require(query.session)
        coin = Currency.parse(query.coin)
        if coin not in TRADABLE_COINS:
            raise UnsupportedCurrencyError(coin.value)

        account = self._account_repo.get(username)
        if account is None:
            raise AccountNotFoundError(username)

        return QuoteResult(
            coin=coin,
            price_usd=self._price_source.current_price(coin),
            usd_balance=account.balance(Currency.USD),
        )
