"""
Tests for the exchange application layer (use cases).

Use cases run against the SQLite-backed stores, a stub price oracle
and a controllable clock. Mocked ports are used where only the
orchestration matters.
"""

import random
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

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
from coinledger.application.exchange.pricing import FallbackPriceSource
from coinledger.application.exchange.purchase import PurchaseUseCase
from coinledger.application.exchange.session_gate import SessionGate
from coinledger.application.exchange.sign_in import SignInUseCase
from coinledger.application.exchange.sign_out import SignOutUseCase
from coinledger.application.exchange.sign_up import SignUpUseCase
from coinledger.application.exchange.view_dashboard import ViewDashboardUseCase
from coinledger.domain.exchange.entities import Currency
from coinledger.domain.exchange.errors import (
    INVALID_CREDENTIALS,
    AccountExistsError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PriceFetchError,
    UnsupportedCurrencyError,
    ValidationFailedError,
)
from coinledger.domain.exchange.ports import AccountRepository, PriceOracle
from coinledger.domain.exchange.sessions import anonymous_session
from coinledger.domain.exchange.trade_validator import MINIMUM_PURCHASE, TradeValidator


@pytest.fixture
def gate(session_manager, session_repo) -> SessionGate:
    return SessionGate(session_manager, session_repo)


@pytest.fixture
def price_source(oracle) -> FallbackPriceSource:
    return FallbackPriceSource(oracle, rng=random.Random(3))


@pytest.fixture
def sign_up(account_repo, session_repo, session_manager, ledger) -> SignUpUseCase:
    return SignUpUseCase(account_repo, session_repo, session_manager, ledger)


@pytest.fixture
def sign_in(account_repo, session_repo, session_manager) -> SignInUseCase:
    return SignInUseCase(account_repo, session_repo, session_manager)


@pytest.fixture
def dashboard(account_repo, gate, price_source, ledger) -> ViewDashboardUseCase:
    return ViewDashboardUseCase(account_repo, gate, price_source, ledger)


@pytest.fixture
def purchase(account_repo, gate, price_source, ledger) -> PurchaseUseCase:
    return PurchaseUseCase(account_repo, gate, price_source, TradeValidator(), ledger)


@pytest.fixture
def signed_in(sign_up, sign_in):
    """Create 'alice' and return her signed-in session."""
    sign_up.execute(SignUpCommand(username="alice", password="secret", agreement_accepted=True))
    result = sign_in.execute(
        SignInCommand(session=anonymous_session(), username="alice", password="secret")
    )
    return result.session


def _set_usd(account_repo, username: str, amount: str) -> None:
    account = account_repo.get(username)
    account.balances[Currency.USD] = Decimal(amount)
    account_repo.update(account)


class TestSignUpUseCase:
    """Tests for the SignUpUseCase."""

    def test_creates_funded_account(self, sign_up, account_repo) -> None:
        result = sign_up.execute(
            SignUpCommand(username="  alice ", password="secret", agreement_accepted=True)
        )
        assert result.username == "alice"
        assert "Please sign-in to continue." in result.message
        account = account_repo.get("alice")
        assert 8999 <= account.balance(Currency.USD) <= 19999
        assert account.balance(Currency.BTC) == 0
        assert account.balance(Currency.ETH) == 0
        assert account.password_hash != "secret"

    def test_username_with_space_rejected(self, sign_up, account_repo) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            sign_up.execute(
                SignUpCommand(username="alice bob", password="ab", agreement_accepted=False)
            )
        assert "Username must not contain spaces." in exc_info.value.messages
        assert len(exc_info.value.messages) == 3
        assert account_repo.load() == {}

    def test_duplicate_username_rejected(self, sign_up) -> None:
        command = SignUpCommand(username="alice", password="secret", agreement_accepted=True)
        sign_up.execute(command)
        with pytest.raises(ValidationFailedError) as exc_info:
            sign_up.execute(command)
        assert exc_info.value.messages == ["Username 'alice' is unavailable."]

    def test_insert_race_reported_as_unavailable(self, session_repo, session_manager, ledger) -> None:
        accounts = MagicMock(spec=AccountRepository)
        accounts.get.return_value = None
        accounts.add.side_effect = AccountExistsError("alice")
        use_case = SignUpUseCase(accounts, session_repo, session_manager, ledger)
        with pytest.raises(ValidationFailedError) as exc_info:
            use_case.execute(
                SignUpCommand(username="alice", password="secret", agreement_accepted=True)
            )
        assert exc_info.value.messages == ["Username 'alice' is unavailable."]

    def test_does_not_sign_in_and_signs_out_current(self, sign_up, signed_in, session_repo) -> None:
        sign_up.execute(
            SignUpCommand(
                username="bob", password="secret", agreement_accepted=True, session=signed_in
            )
        )
        assert not signed_in.is_signed_in
        assert session_repo.get(signed_in.token) is None


class TestSignInUseCase:
    """Tests for the SignInUseCase."""

    def test_valid_credentials_start_session(self, sign_up, sign_in, session_repo) -> None:
        sign_up.execute(SignUpCommand(username="alice", password="secret", agreement_accepted=True))
        session = anonymous_session()
        old_token = session.token
        result = sign_in.execute(
            SignInCommand(session=session, username=" alice ", password="secret")
        )
        assert result.message == "You have successfully signed in as 'alice'."
        assert result.session.username == "alice"
        assert result.session.token != old_token
        assert session_repo.get(result.session.token).username == "alice"

    @pytest.mark.parametrize("username, password", [("alice", "wrong"), ("mallory", "secret")])
    def test_unknown_user_and_wrong_password_look_identical(
        self, sign_up, sign_in, username: str, password: str
    ) -> None:
        sign_up.execute(SignUpCommand(username="alice", password="secret", agreement_accepted=True))
        session = anonymous_session()
        with pytest.raises(InvalidCredentialsError) as exc_info:
            sign_in.execute(SignInCommand(session=session, username=username, password=password))
        assert exc_info.value.message == INVALID_CREDENTIALS
        assert not session.is_signed_in


class TestSignOutUseCase:
    """Tests for the SignOutUseCase."""

    def test_clears_stored_session(self, signed_in, session_repo, session_manager) -> None:
        use_case = SignOutUseCase(session_repo, session_manager)
        use_case.execute(SignOutCommand(session=signed_in))
        assert not signed_in.is_signed_in
        assert session_repo.get(signed_in.token) is None
        use_case.execute(SignOutCommand(session=signed_in))


class TestSessionGate:
    """Tests for the authenticated-operation gate."""

    def test_expired_session_removed_from_store(self, gate, signed_in, session_repo, clock) -> None:
        clock.advance(5)
        with pytest.raises(NotAuthenticatedError) as exc_info:
            gate.require(signed_in)
        assert exc_info.value.expired
        assert session_repo.get(signed_in.token) is None

    def test_activity_persisted(self, gate, signed_in, session_repo, clock) -> None:
        clock.advance(1)
        gate.require(signed_in)
        assert session_repo.get(signed_in.token).last_activity_at == clock.now


class TestViewDashboardUseCase:
    """Tests for the ViewDashboardUseCase."""

    def test_bonus_notice_shown_once(self, dashboard, signed_in, account_repo) -> None:
        funded = account_repo.get("alice").balance(Currency.USD)
        first = dashboard.execute(ViewDashboardQuery(session=signed_in))
        assert first.bonus_notice == f"Sign-up bonus! Your account was funded +${funded}."
        assert account_repo.get("alice").is_new_account is False
        second = dashboard.execute(ViewDashboardQuery(session=signed_in))
        assert second.bonus_notice is None

    def test_values_portfolio_at_current_prices(self, dashboard, signed_in, account_repo) -> None:
        account = account_repo.get("alice")
        account.balances[Currency.USD] = Decimal("100")
        account.balances[Currency.BTC] = Decimal("0.5")
        account.balances[Currency.ETH] = Decimal("2")
        account_repo.update(account)
        result = dashboard.execute(ViewDashboardQuery(session=signed_in))
        assert result.counter_values[Currency.USD] == Decimal("1")
        assert result.total_value_usd == Decimal("100") + Decimal("5000") + Decimal("500")

    def test_requires_session(self, dashboard) -> None:
        with pytest.raises(NotAuthenticatedError):
            dashboard.execute(ViewDashboardQuery(session=anonymous_session()))


class TestPurchaseUseCase:
    """Tests for the PurchaseUseCase."""

    def test_minimum_purchase_rejected(self, purchase, signed_in) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="BTC",
                    usd_amount=Decimal("0.5"),
                    coin_amount=Decimal("0.00005"),
                )
            )
        assert MINIMUM_PURCHASE in exc_info.value.messages

    def test_insufficient_funds_leaves_balances(self, purchase, signed_in, account_repo) -> None:
        _set_usd(account_repo, "alice", "100")
        with pytest.raises(ValidationFailedError) as exc_info:
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="BTC",
                    usd_amount=Decimal("150"),
                    coin_amount=Decimal("0.015"),
                )
            )
        assert exc_info.value.messages == ["Not enough funds to purchase 0.015 BTC."]
        account = account_repo.get("alice")
        assert account.balance(Currency.USD) == Decimal("100")
        assert account.balance(Currency.BTC) == 0
        assert account.transactions == []

    def test_sequential_purchases_accumulate(self, purchase, signed_in, account_repo) -> None:
        _set_usd(account_repo, "alice", "5000")
        for usd, coins in (("1000", "0.1"), ("250", "0.025")):
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="BTC",
                    usd_amount=Decimal(usd),
                    coin_amount=Decimal(coins),
                )
            )
        account = account_repo.get("alice")
        assert account.balance(Currency.USD) == Decimal("3750")
        assert account.balance(Currency.BTC) == Decimal("0.125")
        assert [t.usd_amount for t in account.transactions] == [Decimal("1000"), Decimal("250")]

    def test_eth_purchase(self, purchase, signed_in, account_repo) -> None:
        _set_usd(account_repo, "alice", "1000")
        result = purchase.execute(
            PurchaseCommand(
                session=signed_in,
                coin="ETH",
                usd_amount=Decimal("500"),
                coin_amount=Decimal("2"),
            )
        )
        assert result.message == "You have successfully purchased 2 ETH!"
        assert account_repo.get("alice").balance(Currency.ETH) == Decimal("2")

    def test_usd_is_not_tradable(self, purchase, signed_in) -> None:
        with pytest.raises(UnsupportedCurrencyError):
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="USD",
                    usd_amount=Decimal("10"),
                    coin_amount=Decimal("10"),
                )
            )

    def test_price_outage_uses_fallback(self, purchase, signed_in, account_repo, oracle) -> None:
        oracle.fail = True
        _set_usd(account_repo, "alice", "1000")
        with pytest.raises(ValidationFailedError) as exc_info:
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="BTC",
                    usd_amount=Decimal("100"),
                    coin_amount=Decimal("1"),
                )
            )
        assert exc_info.value.messages == ["Price adjusted. Please try again."]

    def test_expired_session_rejected_without_mutation(
        self, purchase, signed_in, account_repo, clock
    ) -> None:
        before = account_repo.get("alice").balance(Currency.USD)
        clock.advance(10)
        with pytest.raises(NotAuthenticatedError):
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="BTC",
                    usd_amount=Decimal("1000"),
                    coin_amount=Decimal("0.1"),
                )
            )
        assert account_repo.get("alice").balance(Currency.USD) == before

    def test_session_checked_before_coin_symbol(self, purchase) -> None:
        with pytest.raises(NotAuthenticatedError):
            purchase.execute(
                PurchaseCommand(
                    session=anonymous_session(),
                    coin="DOGE",
                    usd_amount=Decimal("10"),
                    coin_amount=Decimal("1"),
                )
            )

    def test_unknown_coin_symbol(self, purchase, signed_in) -> None:
        with pytest.raises(UnsupportedCurrencyError):
            purchase.execute(
                PurchaseCommand(
                    session=signed_in,
                    coin="DOGE",
                    usd_amount=Decimal("10"),
                    coin_amount=Decimal("1"),
                )
            )


class TestGetQuoteUseCase:
    def test_quote_returns_price_and_balance(self, account_repo, gate, price_source, signed_in) -> None:
        _set_usd(account_repo, "alice", "1234.5")
        use_case = GetQuoteUseCase(account_repo, gate, price_source)
        result = use_case.execute(GetQuoteQuery(session=signed_in, coin="ETH"))
        assert result.price_usd == Decimal("250")
        assert result.usd_balance == Decimal("1234.5")

    def test_session_checked_before_coin_symbol(self, account_repo, gate, price_source) -> None:
        use_case = GetQuoteUseCase(account_repo, gate, price_source)
        with pytest.raises(NotAuthenticatedError):
            use_case.execute(GetQuoteQuery(session=anonymous_session(), coin="doge"))


class TestFallbackPriceSource:
    """Tests for the synthetic price fallback."""

    def test_passes_through_live_prices(self, oracle) -> None:
        source = FallbackPriceSource(oracle)
        assert source.current_prices() == {Currency.BTC: Decimal("10000"), Currency.ETH: Decimal("250")}

    def test_fallback_ranges(self) -> None:
        failing = MagicMock(spec=PriceOracle)
        failing.current_prices.side_effect = PriceFetchError("timeout")
        source = FallbackPriceSource(failing, rng=random.Random(11))
        for _ in range(50):
            prices = source.current_prices()
            assert 5000 <= prices[Currency.BTC] <= 8000
            assert 200 <= prices[Currency.ETH] <= 300

    def test_incomplete_quote_falls_back(self) -> None:
        partial = MagicMock(spec=PriceOracle)
        partial.current_prices.return_value = {Currency.BTC: Decimal("10000")}
        prices = FallbackPriceSource(partial).current_prices()
        assert 200 <= prices[Currency.ETH] <= 300


class TestGetPriceHistoryUseCase:
    def test_min_and_max(self, oracle) -> None:
        result = GetPriceHistoryUseCase(oracle).execute(GetPriceHistoryQuery())
        assert len(result.points) == 3
        assert result.min_price == Decimal("42000.5")
        assert result.max_price == Decimal("44100.25")

    def test_empty_history(self) -> None:
        empty = MagicMock(spec=PriceOracle)
        empty.historical_prices.return_value = []
        result = GetPriceHistoryUseCase(empty).execute(GetPriceHistoryQuery())
        assert result.min_price is None
        assert result.max_price is None

    def test_fetch_error_propagates(self, oracle) -> None:
        oracle.fail = True
        with pytest.raises(PriceFetchError):
            GetPriceHistoryUseCase(oracle).execute(GetPriceHistoryQuery())
