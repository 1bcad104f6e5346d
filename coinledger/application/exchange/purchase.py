"""
Use case: Buy a coin with USD at the live price.

Input: PurchaseCommand (session, coin, usd_amount, coin_amount)
Output: PurchaseResult
Side effects: Debits USD, credits the coin and appends a trade record,
    then persists the account. Nothing changes when validation fails.
Failure cases: NotAuthenticatedError, UnsupportedCurrencyError,
    ValidationFailedError, AccountNotFoundError, ConcurrentUpdateError,
    StorageUnavailableError.
"""

import logging

from coinledger.application.exchange.dtos import PurchaseCommand, PurchaseResult
from coinledger.application.exchange.pricing import FallbackPriceSource
from coinledger.application.exchange.session_gate import SessionGate
from coinledger.domain.exchange.entities import TRADABLE_COINS, Currency
from coinledger.domain.exchange.errors import (
    AccountNotFoundError,
    UnsupportedCurrencyError,
    ValidationFailedError,
)
from coinledger.domain.exchange.ledger import AccountLedger
from coinledger.domain.exchange.ports import AccountRepository
from coinledger.domain.exchange.trade_validator import TradeProposal, TradeValidator

logger = logging.getLogger(__name__)


class PurchaseUseCase:
    """Orchestrates a validated buy.

    Fetches the live price (falling back to synthetic prices), runs every
    trade rule, and only then mutates and persists the account.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        session_gate: SessionGate,
        price_source: FallbackPriceSource,
        validator: TradeValidator,
        ledger: AccountLedger,
    ) -> None:
        self._account_repo = account_repo
        self._session_gate = session_gate
        self._price_source = price_source
        self._validator = validator
        self._ledger = ledger

    def execute(self, command: PurchaseCommand) -> PurchaseResult:
        """Run the purchase use case.

        Raises:
            ValidationFailedError: With the message of every failing rule.
        """
        username = self._session_gate.require(command.session)
        coin = Currency.parse(command.coin)
        if coin not in TRADABLE_COINS:
            raise UnsupportedCurrencyError(coin.value)

        account = self._account_repo.get(username)
        if account is None:
            raise AccountNotFoundError(username)

        price = self._price_source.current_price(coin)
        proposal = TradeProposal(
            coin=coin,
            usd_amount=command.usd_amount,
            coin_amount=command.coin_amount,
            current_price_usd=price,
            usd_balance=account.balance(Currency.USD),
        )
        errors = self._validator.errors(proposal)
        if errors:
            logger.info(
                "Purchase rejected for username=%s coin=%s: %d error(s)",
                username,
                coin.value,
                len(errors),
            )
            raise ValidationFailedError(errors)

        record = self._ledger.apply_purchase(
            account,
            coin,
            command.usd_amount,
            command.coin_amount,
            price,
        )
        self._account_repo.update(account)

        logger.info(
            "Executed purchase username=%s coin=%s usd=%s coins=%s price=%s",
            username,
            record.coin.value,
            record.usd_amount,
            record.coin_amount,
            record.price_usd,
        )
        return PurchaseResult(
            coin=record.coin,
            usd_amount=record.usd_amount,
            coin_amount=record.coin_amount,
            price_usd=record.price_usd,
            balances=dict(account.balances),
            message=(
                f"You have successfully purchased {record.coin_amount} "
                f"{record.coin.value}!"
            ),
        )
