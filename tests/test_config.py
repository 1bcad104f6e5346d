"""
Tests for environment-dependent configuration.

The test environment uses short idle and market data timeouts;
every other environment uses the production ones.
"""

from datetime import timedelta
from unittest.mock import patch

from coinledger.core.config import Settings
from coinledger.domain.exchange.entities import Session
from coinledger.domain.exchange.ledger import utc_now
from coinledger.interfaces.exchange.dependencies import get_price_oracle, get_session_manager

DEPENDENCY_SETTINGS = "coinledger.interfaces.exchange.dependencies.settings"


def _idle_session(seconds: int) -> Session:
    return Session(
        token="tok", username="alice", last_activity_at=utc_now() - timedelta(seconds=seconds)
    )


class TestTimeoutSettings:
    def test_test_environment_uses_short_timeouts(self) -> None:
        config = Settings(environment="test")
        assert config.is_test is True
        assert config.idle_timeout_seconds == 2
        assert config.price_timeout_seconds == 2.0

    def test_production_uses_long_timeouts(self) -> None:
        config = Settings(environment="production")
        assert config.is_test is False
        assert config.idle_timeout_seconds == 1500
        assert config.price_timeout_seconds == 10.0

    def test_timeouts_overridable(self) -> None:
        config = Settings(environment="production", session_idle_timeout_seconds=60)
        assert config.idle_timeout_seconds == 60


class TestConfiguredProviders:
    """The request dependencies read the timeouts from settings."""

    def test_session_manager_short_timeout_under_test(self) -> None:
        with patch(DEPENDENCY_SETTINGS, Settings(environment="test")):
            manager = get_session_manager()
        assert manager.is_expired(_idle_session(100)) is True

    def test_session_manager_long_timeout_in_production(self) -> None:
        with patch(DEPENDENCY_SETTINGS, Settings(environment="production")):
            manager = get_session_manager()
        assert manager.is_expired(_idle_session(100)) is False
        assert manager.is_expired(_idle_session(1600)) is True

    def test_price_oracle_timeout(self) -> None:
        with patch(DEPENDENCY_SETTINGS, Settings(environment="test")):
            assert get_price_oracle().timeout == 2.0
        with patch(DEPENDENCY_SETTINGS, Settings(environment="production")):
            assert get_price_oracle().timeout == 10.0
