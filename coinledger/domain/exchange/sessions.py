"""
Session lifecycle: sign-in, sign-out and idle-timeout expiry.

Sessions are plain values passed in by the caller. Expiry is detected
lazily, when a session is next checked, never proactively.
"""

import secrets
from datetime import datetime
from typing import Callable

from coinledger.domain.exchange.entities import Session
from coinledger.domain.exchange.errors import (
    SIGNED_OUT_IDLE,
    NotAuthenticatedError,
)
from coinledger.domain.exchange.ledger import utc_now

TOKEN_BYTES = 32


def new_session_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def anonymous_session() -> Session:
    """Return a fresh signed-out session."""
    return Session(token=new_session_token())


class SessionManager:
    """Two-state machine (signed out / signed in) over a Session value.

    Args:
        idle_timeout_seconds: Inactivity allowed before a session expires.
        clock: Returns the current UTC time.
    """

    def __init__(
        self,
        idle_timeout_seconds: float,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._idle_timeout_seconds = idle_timeout_seconds
        self._clock = clock

    @property
    def idle_timeout_seconds(self) -> float:
        return self._idle_timeout_seconds

    def sign_in(self, session: Session, username: str) -> None:
        """Sign ``username`` in, issuing a new token for the session."""
        session.token = new_session_token()
        session.username = username
        session.last_activity_at = self._clock()

    def sign_out(self, session: Session) -> None:
        session.username = None
        session.last_activity_at = None

    def touch(self, session: Session) -> None:
        """Record activity now.

        Raises:
            NotAuthenticatedError: If the session is signed out.
        """
        if not session.is_signed_in:
            raise NotAuthenticatedError()
        session.last_activity_at = self._clock()

    def is_expired(self, session: Session) -> bool:
        if not session.is_signed_in or session.last_activity_at is None:
            return False
        idle = (self._clock() - session.last_activity_at).total_seconds()
        return idle > self._idle_timeout_seconds

    def require_signed_in(self, session: Session) -> str:
        """Gate an authenticated operation.

        An expired session is signed out before the error is raised.

        Returns:
            The signed-in username.

        Raises:
            NotAuthenticatedError: If signed out or idle for too long.
        """
        if not session.is_signed_in:
            raise NotAuthenticatedError()
        if self.is_expired(session):
            self.sign_out(session)
            raise NotAuthenticatedError(SIGNED_OUT_IDLE, expired=True)
        self.touch(session)
        return session.username
