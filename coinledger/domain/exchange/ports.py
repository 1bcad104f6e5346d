"""
Port interfaces (ABCs) for the exchange bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from coinledger.domain.exchange.entities import Account, Currency, PricePoint, Session


class AccountRepository(ABC):
    """Port for the durable username → account mapping."""

    @abstractmethod
    def load(self) -> dict[str, Account]:
        """Return every stored account keyed by username.

        Raises:
            StorageUnavailableError: If the store is missing or corrupt.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, accounts: Iterable[Account]) -> None:
        """Write every given account, inserting new ones and updating the rest."""
        raise NotImplementedError

    @abstractmethod
    def get(self, username: str) -> Optional[Account]:
        """Return the account for a username, or None if there is none."""
        raise NotImplementedError

    @abstractmethod
    def put(self, account: Account) -> None:
        """Insert the account, or overwrite it if the username exists."""
        raise NotImplementedError

    @abstractmethod
    def add(self, account: Account) -> None:
        """Insert a new account.

        Raises:
            AccountExistsError: If the username is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, account: Account) -> None:
        """Persist changes to a loaded account and bump its version.

        New trade records are appended to the stored log.

        Raises:
            ConcurrentUpdateError: If the stored version no longer matches.
        """
        raise NotImplementedError


class SessionRepository(ABC):
    """Port for server-side session state keyed by opaque token."""

    @abstractmethod
    def get(self, token: str) -> Optional[Session]:
        """Return the signed-in session for a token, or None."""
        raise NotImplementedError

    @abstractmethod
    def add(self, session: Session) -> None:
        """Store a freshly signed-in session."""
        raise NotImplementedError

    @abstractmethod
    def save(self, session: Session) -> None:
        """Refresh a stored session. Tokens no longer stored stay gone."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, token: str) -> None:
        """Forget a session. Unknown tokens are ignored."""
        raise NotImplementedError


class PriceOracle(ABC):
    """Port for market data from an external source."""

    @abstractmethod
    def current_prices(self) -> dict[Currency, Decimal]:
        """Return the current USD price of each tradable coin.

        Raises:
            PriceFetchError: On network failure, timeout or a malformed payload.
        """
        raise NotImplementedError

    @abstractmethod
    def historical_prices(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[PricePoint]:
        """Return daily BTC closes in USD ordered by date ascending.

        Without a range the source's default window is used.

        Raises:
            PriceFetchError: On network failure, timeout or a malformed payload.
        """
        raise NotImplementedError
