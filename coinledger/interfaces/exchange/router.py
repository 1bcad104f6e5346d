"""
FastAPI routers for the exchange bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
The session travels as an opaque token in an HTTP-only cookie.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Request, Response, status

from coinledger.application.exchange.dtos import (
    GetPriceHistoryQuery,
    GetQuoteQuery,
    PurchaseCommand,
    SignInCommand,
    SignOutCommand,
    SignUpCommand,
    ViewDashboardQuery,
)
from coinledger.application.exchange.get_price_history import GetPriceHistoryUseCase
from coinledger.application.exchange.get_quote import GetQuoteUseCase
from coinledger.application.exchange.purchase import PurchaseUseCase
from coinledger.application.exchange.sign_in import SignInUseCase
from coinledger.application.exchange.sign_out import SignOutUseCase
from coinledger.application.exchange.sign_up import SignUpUseCase
from coinledger.application.exchange.view_dashboard import ViewDashboardUseCase
from coinledger.core.config import settings
from coinledger.domain.exchange.entities import Currency, Session
from coinledger.interfaces.exchange.dependencies import (
    get_current_session,
    get_price_history_use_case,
    get_purchase_use_case,
    get_quote_use_case,
    get_sign_in_use_case,
    get_sign_out_use_case,
    get_sign_up_use_case,
    get_view_dashboard_use_case,
)
from coinledger.interfaces.exchange.formatting import format_usd
from coinledger.interfaces.exchange.schemas import (
    DashboardResponse,
    ErrorResponse,
    MessageResponse,
    MoneyItem,
    PriceHistoryResponse,
    PricePointItem,
    PurchaseRequest,
    PurchaseResponse,
    QuoteResponse,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
)
from coinledger.shared.security.rate_limiting import limiter

router = APIRouter(tags=["exchange"])


def _set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.token,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


@router.post(
    "/accounts",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Create an account",
    description="Create an account funded with a USD signup bonus. Does not sign in.",
)
def sign_up(
    payload: SignUpRequest,
    response: Response,
    session: Session = Depends(get_current_session),
    use_case: SignUpUseCase = Depends(get_sign_up_use_case),
) -> SignUpResponse:
    """Create a new account."""
    command = SignUpCommand(
        username=payload.username,
        password=payload.password,
        agreement_accepted=payload.agreed,
        session=session,
    )
    result = use_case.execute(command)
    response.delete_cookie(settings.session_cookie_name)
    return SignUpResponse(username=result.username, message=result.message)


@router.post(
    "/sessions",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
    summary="Sign in",
    description="Verify credentials and start a session (sets the session cookie).",
)
@limiter.limit(settings.rate_limit_sign_in)
def sign_in(
    request: Request,
    payload: SignInRequest,
    response: Response,
    session: Session = Depends(get_current_session),
    use_case: SignInUseCase = Depends(get_sign_in_use_case),
) -> MessageResponse:
    """Authenticate and start a session."""
    command = SignInCommand(
        session=session, username=payload.username, password=payload.password
    )
    result = use_case.execute(command)
    _set_session_cookie(response, result.session)
    return MessageResponse(message=result.message)


@router.delete(
    "/sessions/current",
    response_model=MessageResponse,
    summary="Sign out",
    description="End the current session. Succeeds even when signed out.",
)
def sign_out(
    response: Response,
    session: Session = Depends(get_current_session),
    use_case: SignOutUseCase = Depends(get_sign_out_use_case),
) -> MessageResponse:
    """End the caller's session."""
    use_case.execute(SignOutCommand(session=session))
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="You have been signed out.")


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Portfolio overview",
    description="Balances valued at current prices, plus the one-time signup bonus notice.",
)
def view_dashboard(
    session: Session = Depends(get_current_session),
    use_case: ViewDashboardUseCase = Depends(get_view_dashboard_use_case),
) -> DashboardResponse:
    """Show the signed-in user's portfolio."""
    result = use_case.execute(ViewDashboardQuery(session=session))
    holdings = []
    for currency in Currency:
        amount = result.balances.get(currency, Decimal("0"))
        value = amount * result.counter_values[currency]
        holdings.append(
            MoneyItem(
                currency=currency.value,
                name=currency.display_name,
                amount=amount,
                value_usd=value,
                display_value_usd=format_usd(value),
            )
        )
    return DashboardResponse(
        username=result.username,
        holdings=holdings,
        total_value_usd=result.total_value_usd,
        display_total_value_usd=format_usd(result.total_value_usd),
        notice=result.bonus_notice,
    )


@router.get(
    "/exchange/quote/{coin}",
    response_model=QuoteResponse,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Quote a coin",
    description="Current price of a coin and the USD available to spend on it.",
)
def get_quote(
    coin: str,
    session: Session = Depends(get_current_session),
    use_case: GetQuoteUseCase = Depends(get_quote_use_case),
) -> QuoteResponse:
    """Quote a coin for the buy form."""
    result = use_case.execute(GetQuoteQuery(session=session, coin=coin))
    return QuoteResponse(
        coin=result.coin.value,
        price_usd=result.price_usd,
        display_price_usd=format_usd(result.price_usd),
        usd_balance=result.usd_balance,
        display_usd_balance=format_usd(result.usd_balance),
    )


@router.post(
    "/exchange/purchases",
    response_model=PurchaseResponse,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Buy a coin",
    description=(
        "Buy BTC or ETH with USD. The implied unit price must be within 0.5% "
        "of the live price; every failing rule is reported."
    ),
)
def purchase(
    payload: PurchaseRequest,
    session: Session = Depends(get_current_session),
    use_case: PurchaseUseCase = Depends(get_purchase_use_case),
) -> PurchaseResponse:
    """Execute a validated buy."""
    command = PurchaseCommand(
        session=session,
        coin=payload.coin,
        usd_amount=payload.usd_amount,
        coin_amount=payload.coin_amount,
    )
    result = use_case.execute(command)
    return PurchaseResponse(
        coin=result.coin.value,
        usd_amount=result.usd_amount,
        coin_amount=result.coin_amount,
        price_usd=result.price_usd,
        balances={currency.value: amount for currency, amount in result.balances.items()},
        message=result.message,
    )


@router.get(
    "/market/history",
    response_model=PriceHistoryResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Historical BTC prices",
    description="Daily BTC closes in USD for charting, with the window's min and max.",
)
def get_price_history(
    start: date | None = None,
    end: date | None = None,
    use_case: GetPriceHistoryUseCase = Depends(get_price_history_use_case),
) -> PriceHistoryResponse:
    """Return chart data."""
    result = use_case.execute(GetPriceHistoryQuery(start=start, end=end))
    return PriceHistoryResponse(
        points=[PricePointItem(date=p.date, close_usd=p.close_usd) for p in result.points],
        min_price=result.min_price,
        max_price=result.max_price,
    )
