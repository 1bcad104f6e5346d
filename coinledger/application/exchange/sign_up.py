"""
Use case: Create a new account.

Input: SignUpCommand (username, password, agreement_accepted, session)
Output: SignUpResult
Side effects: Inserts the account; signs the caller's session out.
Failure cases: ValidationFailedError, StorageUnavailableError.
"""

import logging

from coinledger.application.exchange.dtos import SignUpCommand, SignUpResult
from coinledger.domain.exchange.errors import AccountExistsError, ValidationFailedError
from coinledger.domain.exchange.ledger import AccountLedger
from coinledger.domain.exchange.ports import AccountRepository, SessionRepository
from coinledger.domain.exchange.registration import (
    sign_up_errors,
    username_unavailable_message,
)
from coinledger.domain.exchange.sessions import SessionManager

logger = logging.getLogger(__name__)


class SignUpUseCase:
    """Orchestrates account creation.

    Validates every sign-up rule at once, then creates the account via
    the ledger and inserts it. The new user is not signed in.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        session_repo: SessionRepository,
        session_manager: SessionManager,
        ledger: AccountLedger,
    ) -> None:
        self._account_repo = account_repo
        self._session_repo = session_repo
        self._session_manager = session_manager
        self._ledger = ledger

    def execute(self, command: SignUpCommand) -> SignUpResult:
        """Run the sign-up use case.

        Raises:
            ValidationFailedError: With every failing rule's message.
        """
        username = command.username.strip()
        taken = set()
        if username and self._account_repo.get(username) is not None:
            taken.add(username)

        errors = sign_up_errors(
            username, command.password, command.agreement_accepted, taken
        )
        if errors:
            logger.info("Sign-up rejected with %d error(s).", len(errors))
            raise ValidationFailedError(errors)

        account = self._ledger.create_account(username, command.password)
        try:
            self._account_repo.add(account)
        except AccountExistsError:
            raise ValidationFailedError([username_unavailable_message(username)]) from None

        if command.session is not None:
            self._session_manager.sign_out(command.session)
            self._session_repo.delete(command.session.token)

        logger.info("Created account username=%s", username)
        return SignUpResult(
            username=username,
            message=(
                f"You have created a new account '{username}'.\n"
                "Please sign-in to continue."
            ),
        )
