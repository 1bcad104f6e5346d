"""
Use case: End the caller's session.

Input: SignOutCommand (session)
Output: None
Side effects: Removes the stored session. Idempotent.
"""

import logging

from coinledger.application.exchange.dtos import SignOutCommand
from coinledger.domain.exchange.ports import SessionRepository
from coinledger.domain.exchange.sessions import SessionManager

logger = logging.getLogger(__name__)


class SignOutUseCase:
    def __init__(
        self, session_repo: SessionRepository, session_manager: SessionManager
    ) -> None:
        self._session_repo = session_repo
        self._session_manager = session_manager

    def execute(self, command: SignOutCommand) -> None:
        if command.session.is_signed_in:
            logger.info("Signed out username=%s", command.session.username)
        self._session_manager.sign_out(command.session)
        self._session_repo.delete(command.session.token)
