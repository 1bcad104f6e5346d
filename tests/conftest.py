"""
Shared fixtures for the CoinLedger test suite.

Stores run on a throwaway SQLite file per test; the market data port
is replaced by an in-memory stub and time by a controllable clock.
"""

import random
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from coinledger.domain.exchange.entities import Currency, PricePoint
from coinledger.domain.exchange.errors import PriceFetchError
from coinledger.domain.exchange.ledger import AccountLedger
from coinledger.domain.exchange.ports import PriceOracle
from coinledger.domain.exchange.sessions import SessionManager
from coinledger.infrastructure.exchange.account_repository import SqlAccountRepository
from coinledger.infrastructure.exchange.schema import build_engine, create_schema
from coinledger.infrastructure.exchange.session_repository import SqlSessionRepository
from coinledger.interfaces.exchange.dependencies import (
    get_db_engine,
    get_ledger,
    get_price_oracle,
    get_session_manager,
)
from coinledger.main import app
from coinledger.shared.security.rate_limiting import limiter

IDLE_TIMEOUT_SECONDS = 2
BTC_PRICE = Decimal("10000")
ETH_PRICE = Decimal("250")


class FakeClock:
    """Deterministic UTC clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class StubOracle(PriceOracle):
    """In-memory PriceOracle; set ``fail`` to simulate an outage."""

    def __init__(self) -> None:
        self.prices = {Currency.BTC: BTC_PRICE, Currency.ETH: ETH_PRICE}
        self.history = [
            PricePoint(date(2024, 1, 1), Decimal("42000.5")),
            PricePoint(date(2024, 1, 2), Decimal("44100.25")),
            PricePoint(date(2024, 1, 3), Decimal("43050")),
        ]
        self.fail = False
        self.calls = 0

    def current_prices(self) -> dict[Currency, Decimal]:
        self.calls += 1
        if self.fail:
            raise PriceFetchError("stub outage")
        return dict(self.prices)

    def historical_prices(self, start=None, end=None) -> list[PricePoint]:
        if self.fail:
            raise PriceFetchError("stub outage")
        return list(self.history)


@pytest.fixture
def engine(tmp_path):
    db_engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    create_schema(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def account_repo(engine) -> SqlAccountRepository:
    return SqlAccountRepository(engine)


@pytest.fixture
def session_repo(engine) -> SqlSessionRepository:
    return SqlSessionRepository(engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_manager(clock) -> SessionManager:
    return SessionManager(idle_timeout_seconds=IDLE_TIMEOUT_SECONDS, clock=clock)


@pytest.fixture
def ledger(clock) -> AccountLedger:
    return AccountLedger(rng=random.Random(7), clock=clock)


@pytest.fixture
def oracle() -> StubOracle:
    return StubOracle()


@pytest.fixture
def client(engine, oracle, session_manager, ledger):
    """TestClient wired to the per-test database, stub oracle and fake clock."""
    app.dependency_overrides[get_db_engine] = lambda: engine
    app.dependency_overrides[get_price_oracle] = lambda: oracle
    app.dependency_overrides[get_session_manager] = lambda: session_manager
    app.dependency_overrides[get_ledger] = lambda: ledger
    limiter.reset()
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()
