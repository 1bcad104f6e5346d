"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here — no scattered magic strings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

TEST_ENVIRONMENT = "test"


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        environment: "production" or "test". Selects the short timeouts.
        database_url: SQLAlchemy URL of the account and session store.
        session_idle_timeout_seconds: Idle time before a session expires.
        test_session_idle_timeout_seconds: Idle timeout under test.
        price_fetch_timeout_seconds: Upper bound on a market data request.
        test_price_fetch_timeout_seconds: Market data timeout under test.
        current_prices_url: Endpoint returning current BTC/ETH prices in USD.
        historical_prices_url: Endpoint returning daily BTC closes.
        session_cookie_name: Cookie carrying the opaque session token.
        session_cookie_secure: Only send the session cookie over HTTPS.
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_sign_in: Rate limit for credential checks.
    """

    model_config = SettingsConfigDict(
        env_prefix="COINLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    project_name: str = "CoinLedger"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "production"

    database_url: str = "sqlite:///./coinledger.db"

    session_idle_timeout_seconds: int = 1500
    test_session_idle_timeout_seconds: int = 2
    price_fetch_timeout_seconds: float = 10.0
    test_price_fetch_timeout_seconds: float = 2.0

    current_prices_url: str = (
        "https://min-api.cryptocompare.com/data/pricemulti?fsyms=BTC,ETH&tsyms=USD"
    )
    historical_prices_url: str = (
        "https://api.coindesk.com/v1/bpi/historical/close.json"
    )

    session_cookie_name: str = "coinledger_session"
    session_cookie_secure: bool = False

    rate_limit_default: str = "60/minute"
    rate_limit_sign_in: str = "10/minute"

    @property
    def is_test(self) -> bool:
        return self.environment == TEST_ENVIRONMENT

    @property
    def idle_timeout_seconds(self) -> int:
        """Return the idle timeout in effect for this environment."""
        if self.is_test:
            return self.test_session_idle_timeout_seconds
        return self.session_idle_timeout_seconds

    @property
    def price_timeout_seconds(self) -> float:
        """Return the market data timeout in effect for this environment."""
        if self.is_test:
            return self.test_price_fetch_timeout_seconds
        return self.price_fetch_timeout_seconds


settings = Settings()
