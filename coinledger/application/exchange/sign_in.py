"""
Use case: Authenticate and start a session.

Input: SignInCommand (session, username, password)
Output: SignInResult
Side effects: Replaces the caller's session with a new signed-in one.
Failure cases: InvalidCredentialsError, StorageUnavailableError.
"""

import logging

from coinledger.application.exchange.dtos import SignInCommand, SignInResult
from coinledger.domain.exchange.errors import InvalidCredentialsError
from coinledger.domain.exchange.passwords import verify_password
from coinledger.domain.exchange.ports import AccountRepository, SessionRepository
from coinledger.domain.exchange.sessions import SessionManager

logger = logging.getLogger(__name__)


class SignInUseCase:
    """Orchestrates credential verification and session start.

    Unknown usernames and wrong passwords fail identically so the
    response never reveals which usernames exist.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        session_repo: SessionRepository,
        session_manager: SessionManager,
    ) -> None:
        self._account_repo = account_repo
        self._session_repo = session_repo
        self._session_manager = session_manager

    def execute(self, command: SignInCommand) -> SignInResult:
        """Run the sign-in use case.

        Raises:
            InvalidCredentialsError: If the credentials do not match an account.
        """
        username = command.username.strip()
        account = self._account_repo.get(username)
        if account is None or not verify_password(command.password, account.password_hash):
            logger.info("Rejected sign-in attempt.")
            raise InvalidCredentialsError()

        session = command.session
        previous_token = session.token
        self._session_manager.sign_in(session, username)
        self._session_repo.delete(previous_token)
        self._session_repo.add(session)

        logger.info("Signed in username=%s", username)
        return SignInResult(
            session=session,
            message=f"You have successfully signed in as '{username}'.",
        )
