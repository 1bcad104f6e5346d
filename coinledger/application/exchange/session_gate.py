"""
Session gate shared by every authenticated use case.

Runs the session manager's check on the caller's session and persists
the outcome: a refreshed activity time, or removal of an expired session.
"""

import logging

from coinledger.domain.exchange.entities import Session
from coinledger.domain.exchange.errors import NotAuthenticatedError
from coinledger.domain.exchange.ports import SessionRepository
from coinledger.domain.exchange.sessions import SessionManager

logger = logging.getLogger(__name__)


class SessionGate:
    """Requires a signed-in, non-expired session."""

    def __init__(
        self, session_manager: SessionManager, session_repo: SessionRepository
    ) -> None:
        self._session_manager = session_manager
        self._session_repo = session_repo

    def require(self, session: Session) -> str:
        """Return the signed-in username, refreshing the session.

        Raises:
            NotAuthenticatedError: If the session is signed out or expired.
        """
        try:
            username = self._session_manager.require_signed_in(session)
        except NotAuthenticatedError as exc:
            if exc.expired:
                logger.info("Session expired after inactivity; signing out.")
                self._session_repo.delete(session.token)
            raise
        self._session_repo.save(session)
        return username
