"""
Account ledger: balance mutations over in-memory accounts.

Pure domain logic with no IO. Every mutation validates its inputs first,
so a rejected operation leaves the account untouched and no balance can
go negative.
"""

import random
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from coinledger.domain.exchange.entities import (
    Account,
    Currency,
    TradeRecord,
    empty_balances,
)
from coinledger.domain.exchange.errors import (
    InsufficientFundsError,
    InvalidAmountError,
)
from coinledger.domain.exchange.passwords import hash_password

SIGNUP_BONUS_MIN_USD = 8999
SIGNUP_BONUS_MAX_USD = 19999


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(value: object) -> Decimal:
    """Convert a raw numeric input into a Decimal.

    Accepts Decimal, int, float and numeric strings. The result may still be
    negative or non-finite; range rules are applied by the caller.

    Raises:
        InvalidAmountError: If the value is not numeric at all.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(value)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(value) from None
    raise InvalidAmountError(value)


def _checked_amount(amount: object) -> Decimal:
    parsed = parse_amount(amount)
    if not parsed.is_finite() or parsed < 0:
        raise InvalidAmountError(amount)
    return parsed


class AccountLedger:
    """Creates accounts and applies credits, debits and purchases.

    Args:
        rng: Random source for the signup bonus.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock

    def create_account(self, username: str, password: str) -> Account:
        """Build a new account funded with a random USD signup bonus."""
        balances = empty_balances()
        balances[Currency.USD] = Decimal(
            self._rng.randint(SIGNUP_BONUS_MIN_USD, SIGNUP_BONUS_MAX_USD)
        )
        return Account(
            username=username,
            password_hash=hash_password(password),
            created_at=self._clock(),
            is_new_account=True,
            balances=balances,
        )

    def credit(self, account: Account, currency: Currency, amount: object) -> None:
        """Increase a balance.

        Raises:
            InvalidAmountError: If the amount is negative or not finite.
        """
        value = _checked_amount(amount)
        account.balances[currency] = account.balance(currency) + value

    def debit(self, account: Account, currency: Currency, amount: object) -> None:
        """Decrease a balance.

        Raises:
            InvalidAmountError: If the amount is negative or not finite.
            InsufficientFundsError: If the amount exceeds the balance.
        """
        value = _checked_amount(amount)
        available = account.balance(currency)
        if value > available:
            raise InsufficientFundsError(currency.value, str(value), str(available))
        account.balances[currency] = available - value

    def apply_purchase(
        self,
        account: Account,
        coin: Currency,
        usd_amount: Decimal,
        coin_amount: Decimal,
        price_usd: Decimal,
        executed_at: Optional[datetime] = None,
    ) -> TradeRecord:
        """Swap USD for a coin and append the trade to the account's log.

        Both legs are checked before either balance changes.
        """
        usd = _checked_amount(usd_amount)
        received = _checked_amount(coin_amount)
        available = account.balance(Currency.USD)
        if usd > available:
            raise InsufficientFundsError(Currency.USD.value, str(usd), str(available))

        self.debit(account, Currency.USD, usd)
        self.credit(account, coin, received)
        record = TradeRecord(
            coin=coin,
            usd_amount=usd,
            coin_amount=received,
            price_usd=price_usd,
            executed_at=executed_at or self._clock(),
        )
        account.transactions.append(record)
        return record

    @staticmethod
    def consume_signup_bonus(account: Account) -> Optional[Decimal]:
        """Mark the welcome bonus as disclosed.

        Returns:
            The funded USD balance the first time, None on every later call.
        """
        if not account.is_new_account:
            return None
        account.is_new_account = False
        return account.balance(Currency.USD)
