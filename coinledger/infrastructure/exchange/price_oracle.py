"""
Adapter: Market data over HTTP.

Implements PriceOracle port with httpx.
Current prices come from a CryptoCompare-style ``pricemulti`` endpoint:

    {"BTC": {"USD": 6712.3}, "ETH": {"USD": 251.8}}

Historical closes come from a CoinDesk-style BPI endpoint:

    {"bpi": {"2018-05-01": 9067.7, "2018-05-02": 9219.9}, ...}

Every request is bounded by a timeout; any failure is a PriceFetchError.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from coinledger.domain.exchange.entities import TRADABLE_COINS, Currency, PricePoint
from coinledger.domain.exchange.errors import PriceFetchError
from coinledger.domain.exchange.ports import PriceOracle

logger = logging.getLogger(__name__)

QUOTE_CURRENCY = "USD"


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise PriceFetchError(f"non-numeric price {value!r}")
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise PriceFetchError(f"non-numeric price {value!r}") from None
    if not price.is_finite() or price <= 0:
        raise PriceFetchError(f"invalid price {value!r}")
    return price


class HttpPriceOracle(PriceOracle):
    """Fetches prices from public market data endpoints.

    Args:
        current_prices_url: URL of the current price endpoint.
        historical_prices_url: URL of the historical close endpoint.
        timeout: Seconds before a request is abandoned.
        client: Optional preconfigured httpx client (tests inject a mock transport).
    """

    def __init__(
        self,
        current_prices_url: str,
        historical_prices_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._current_prices_url = current_prices_url
        self._historical_prices_url = historical_prices_url
        self._timeout = timeout
        self._client = client

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        try:
            if self._client is not None:
                response = self._client.get(url, params=params, timeout=self._timeout)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException:
            logger.warning("Market data request timed out after %.1fs", self._timeout)
            raise PriceFetchError("timeout") from None
        except httpx.HTTPError as exc:
            logger.warning("Market data request failed: %s", type(exc).__name__)
            raise PriceFetchError(type(exc).__name__) from exc
        except ValueError as exc:
            raise PriceFetchError("malformed JSON") from exc

    def current_prices(self) -> dict[Currency, Decimal]:
        payload = self._get_json(self._current_prices_url)
        if not isinstance(payload, dict):
            raise PriceFetchError("unexpected payload")
        prices = {}
        for coin in TRADABLE_COINS:
            quote = payload.get(coin.value)
            if not isinstance(quote, dict) or QUOTE_CURRENCY not in quote:
                raise PriceFetchError(f"missing {coin.value} quote")
            prices[coin] = _to_decimal(quote[QUOTE_CURRENCY])
        return prices

    def historical_prices(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[PricePoint]:
        params = {}
        if start is not None:
            params["start"] = start.isoformat()
        if end is not None:
            params["end"] = end.isoformat()

        payload = self._get_json(self._historical_prices_url, params=params or None)
        bpi = payload.get("bpi") if isinstance(payload, dict) else None
        if not isinstance(bpi, dict):
            raise PriceFetchError("missing bpi series")

        points = []
        for day, close in bpi.items():
            try:
                parsed_day = date.fromisoformat(day)
            except (TypeError, ValueError):
                raise PriceFetchError(f"invalid date {day!r}") from None
            points.append(PricePoint(date=parsed_day, close_usd=_to_decimal(close)))
        points.sort(key=lambda p: p.date)
        return points
