"""
Use case: Fetch historical BTC closes for charting.

Input: GetPriceHistoryQuery (start, end)
Output: PriceHistoryResult
Side effects: None.
Failure cases: PriceFetchError (no fallback for chart data).
"""

import logging

from coinledger.application.exchange.dtos import GetPriceHistoryQuery, PriceHistoryResult
from coinledger.domain.exchange.ports import PriceOracle

logger = logging.getLogger(__name__)


class GetPriceHistoryUseCase:
    def __init__(self, oracle: PriceOracle) -> None:
        self._oracle = oracle

    def execute(self, query: GetPriceHistoryQuery) -> PriceHistoryResult:
        logger.info("Fetching price history start=%s end=%s", query.start, query.end)
        points = self._oracle.historical_prices(start=query.start, end=query.end)
        closes = [p.close_usd for p in points]
        return PriceHistoryResult(
            points=points,
            min_price=min(closes) if closes else None,
            max_price=max(closes) if closes else None,
        )
