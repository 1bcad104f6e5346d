"""
Dependency injection for the exchange bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the exchange context.
Tests replace the engine, oracle or session manager through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.engine import Engine

from coinledger.application.exchange.get_price_history import GetPriceHistoryUseCase
from coinledger.application.exchange.get_quote import GetQuoteUseCase
from coinledger.application.exchange.pricing import FallbackPriceSource
from coinledger.application.exchange.purchase import PurchaseUseCase
from coinledger.application.exchange.session_gate import SessionGate
from coinledger.application.exchange.sign_in import SignInUseCase
from coinledger.application.exchange.sign_out import SignOutUseCase
from coinledger.application.exchange.sign_up import SignUpUseCase
from coinledger.application.exchange.view_dashboard import ViewDashboardUseCase
from coinledger.core.config import settings
from coinledger.domain.exchange.entities import Session
from coinledger.domain.exchange.ledger import AccountLedger
from coinledger.domain.exchange.ports import (
    AccountRepository,
    PriceOracle,
    SessionRepository,
)
from coinledger.domain.exchange.sessions import SessionManager, anonymous_session
from coinledger.domain.exchange.trade_validator import TradeValidator
from coinledger.infrastructure.exchange.account_repository import SqlAccountRepository
from coinledger.infrastructure.exchange.price_oracle import HttpPriceOracle
from coinledger.infrastructure.exchange.schema import build_engine
from coinledger.infrastructure.exchange.session_repository import SqlSessionRepository


@lru_cache
def _engine_for(database_url: str) -> Engine:
    return build_engine(database_url)


def get_db_engine() -> Engine:
    """Return the shared SQLAlchemy engine for the configured database."""
    return _engine_for(settings.database_url)


def get_price_oracle() -> PriceOracle:
    return HttpPriceOracle(
        current_prices_url=settings.current_prices_url,
        historical_prices_url=settings.historical_prices_url,
        timeout=settings.price_timeout_seconds,
    )


def get_session_manager() -> SessionManager:
    return SessionManager(idle_timeout_seconds=settings.idle_timeout_seconds)


def get_ledger() -> AccountLedger:
    return AccountLedger()


def get_account_repository(
    engine: Engine = Depends(get_db_engine),
) -> AccountRepository:
    return SqlAccountRepository(engine)


def get_session_repository(
    engine: Engine = Depends(get_db_engine),
) -> SessionRepository:
    return SqlSessionRepository(engine)


def get_price_source(
    oracle: PriceOracle = Depends(get_price_oracle),
) -> FallbackPriceSource:
    return FallbackPriceSource(oracle)


def get_session_gate(
    session_manager: SessionManager = Depends(get_session_manager),
    session_repo: SessionRepository = Depends(get_session_repository),
) -> SessionGate:
    return SessionGate(session_manager, session_repo)


def get_current_session(
    request: Request,
    session_repo: SessionRepository = Depends(get_session_repository),
) -> Session:
    """Load the caller's session from its cookie.

    A missing, unknown or forged token yields a fresh signed-out session.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        session = session_repo.get(token)
        if session is not None:
            return session
    return anonymous_session()


def get_sign_up_use_case(
    account_repo: AccountRepository = Depends(get_account_repository),
    session_repo: SessionRepository = Depends(get_session_repository),
    session_manager: SessionManager = Depends(get_session_manager),
    ledger: AccountLedger = Depends(get_ledger),
) -> SignUpUseCase:
    """Build SignUpUseCase with its infrastructure dependencies."""
    return SignUpUseCase(
        account_repo=account_repo,
        session_repo=session_repo,
        session_manager=session_manager,
        ledger=ledger,
    )


def get_sign_in_use_case(
    account_repo: AccountRepository = Depends(get_account_repository),
    session_repo: SessionRepository = Depends(get_session_repository),
    session_manager: SessionManager = Depends(get_session_manager),
) -> SignInUseCase:
    """Build SignInUseCase with its infrastructure dependencies."""
    return SignInUseCase(
        account_repo=account_repo,
        session_repo=session_repo,
        session_manager=session_manager,
    )


def get_sign_out_use_case(
    session_repo: SessionRepository = Depends(get_session_repository),
    session_manager: SessionManager = Depends(get_session_manager),
) -> SignOutUseCase:
    return SignOutUseCase(session_repo=session_repo, session_manager=session_manager)


def get_view_dashboard_use_case(
    account_repo: AccountRepository = Depends(get_account_repository),
    session_gate: SessionGate = Depends(get_session_gate),
    price_source: FallbackPriceSource = Depends(get_price_source),
    ledger: AccountLedger = Depends(get_ledger),
) -> ViewDashboardUseCase:
    """Build ViewDashboardUseCase with its infrastructure dependencies."""
    return ViewDashboardUseCase(
        account_repo=account_repo,
        session_gate=session_gate,
        price_source=price_source,
        ledger=ledger,
    )


def get_quote_use_case(
    account_repo: AccountRepository = Depends(get_account_repository),
    session_gate: SessionGate = Depends(get_session_gate),
    price_source: FallbackPriceSource = Depends(get_price_source),
) -> GetQuoteUseCase:
    return GetQuoteUseCase(
        account_repo=account_repo,
        session_gate=session_gate,
        price_source=price_source,
    )


def get_purchase_use_case(
    account_repo: AccountRepository = Depends(get_account_repository),
    session_gate: SessionGate = Depends(get_session_gate),
    price_source: FallbackPriceSource = Depends(get_price_source),
    ledger: AccountLedger = Depends(get_ledger),
) -> PurchaseUseCase:
    """Build PurchaseUseCase with its infrastructure dependencies."""
    return PurchaseUseCase(
        account_repo=account_repo,
        session_gate=session_gate,
        price_source=price_source,
        validator=TradeValidator(),
        ledger=ledger,
    )


def get_price_history_use_case(
    oracle: PriceOracle = Depends(get_price_oracle),
) -> GetPriceHistoryUseCase:
    return GetPriceHistoryUseCase(oracle=oracle)
