"""
Domain-specific errors for the exchange bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""

MESSAGE_SEPARATOR = "\n"

SIGN_IN_REQUIRED = "Please sign-in to continue."
SIGNED_OUT_IDLE = "You have been logged out due to inactivity."
INVALID_CREDENTIALS = "Invalid credentials. Please try again."


class ExchangeDomainError(Exception):
    """Base error for all exchange domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ValidationFailedError(ExchangeDomainError):
    """Raised when user input fails one or more validation rules.

    Every failing rule contributes a message; they are reported together.
    """

    def __init__(self, messages: list[str]) -> None:
        self.messages = list(messages)
        super().__init__(MESSAGE_SEPARATOR.join(self.messages))


class NotAuthenticatedError(ExchangeDomainError):
    """Raised when an operation needs a signed-in, non-expired session."""

    def __init__(self, message: str = SIGN_IN_REQUIRED, expired: bool = False) -> None:
        super().__init__(message)
        self.expired = expired


class InvalidCredentialsError(ExchangeDomainError):
    """Raised when a username/password pair does not match a stored account.

    Unknown usernames and wrong passwords raise the same error.
    """

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS)


class InvalidAmountError(ExchangeDomainError):
    """Raised when a monetary amount is negative, not finite or unparseable."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid amount: {value!r}")
        self.value = value


class InsufficientFundsError(ExchangeDomainError):
    """Raised when a debit exceeds the available balance."""

    def __init__(self, currency: str, required: str, available: str) -> None:
        super().__init__(
            f"Insufficient {currency} funds: required {required}, available {available}"
        )
        self.currency = currency
        self.required = required
        self.available = available


class UnsupportedCurrencyError(ExchangeDomainError):
    """Raised when a currency symbol is not BTC, ETH or USD, or not tradable."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Unsupported currency: {symbol}")
        self.symbol = symbol


class AccountNotFoundError(ExchangeDomainError):
    """Raised when a signed-in session refers to an account that no longer exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Account not found: {username}")
        self.username = username


class AccountExistsError(ExchangeDomainError):
    """Raised when inserting an account whose username is already taken."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Account already exists: {username}")
        self.username = username


class ConcurrentUpdateError(ExchangeDomainError):
    """Raised when an account changed in storage since it was loaded."""

    def __init__(self, username: str, expected_version: int) -> None:
        super().__init__(
            f"Account {username} was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.username = username
        self.expected_version = expected_version


class PriceFetchError(ExchangeDomainError):
    """Raised when market prices cannot be fetched from the external source."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Price fetch failed: {reason}")
        self.reason = reason


class StorageUnavailableError(ExchangeDomainError):
    """Raised when the account or session store cannot be read or written."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Storage unavailable: {reason}")
        self.reason = reason
