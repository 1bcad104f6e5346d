"""
Use case: Show the signed-in user's portfolio.

Input: ViewDashboardQuery (session)
Output: DashboardResult
Side effects: Refreshes the session. On the first view after sign-up,
    clears the account's new-account flag and persists it.
Failure cases: NotAuthenticatedError, AccountNotFoundError,
    ConcurrentUpdateError, StorageUnavailableError.
"""

import logging
from decimal import Decimal

from coinledger.application.exchange.dtos import DashboardResult, ViewDashboardQuery
from coinledger.application.exchange.pricing import FallbackPriceSource
from coinledger.application.exchange.session_gate import SessionGate
from coinledger.domain.exchange.entities import Currency
from coinledger.domain.exchange.errors import AccountNotFoundError
from coinledger.domain.exchange.ledger import AccountLedger
from coinledger.domain.exchange.ports import AccountRepository

logger = logging.getLogger(__name__)


def bonus_notice(amount: Decimal) -> str:
    return f"Sign-up bonus! Your account was funded +${amount}."


class ViewDashboardUseCase:
    """Orchestrates the portfolio overview and the one-time bonus notice."""

    def __init__(
        self,
        account_repo: AccountRepository,
        session_gate: SessionGate,
        price_source: FallbackPriceSource,
        ledger: AccountLedger,
    ) -> None:
        self._account_repo = account_repo
        self._session_gate = session_gate
        self._price_source = price_source
        self._ledger = ledger

    def execute(self, query: ViewDashboardQuery) -> DashboardResult:
        username = self._session_gate.require(query.session)
        account = self._account_repo.get(username)
        if account is None:
            raise AccountNotFoundError(username)

        notice = None
        bonus = self._ledger.consume_signup_bonus(account)
        if bonus is not None:
            self._account_repo.update(account)
            notice = bonus_notice(bonus)
            logger.info("Disclosed signup bonus to username=%s", username)

        prices = self._price_source.current_prices()
        counter_values = {
            Currency.BTC: prices[Currency.BTC],
            Currency.ETH: prices[Currency.ETH],
            Currency.USD: Decimal("1"),
        }
        total = sum(
            (account.balance(currency) * value for currency, value in counter_values.items()),
            Decimal("0"),
        )
        return DashboardResult(
            username=username,
            balances=dict(account.balances),
            counter_values=counter_values,
            total_value_usd=total,
            bonus_notice=notice,
        )
