"""
Adapter: Session store.

Implements SessionRepository port on top of SQLAlchemy.
Only signed-in sessions are stored; an unknown token means signed out.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine

from coinledger.domain.exchange.entities import Session
from coinledger.domain.exchange.ports import SessionRepository
from coinledger.infrastructure.exchange.account_repository import storage_errors
from coinledger.infrastructure.exchange.schema import sessions


class SqlSessionRepository(SessionRepository):
    """Stores session tokens with their username and last activity time."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, token: str) -> Optional[Session]:
        with storage_errors(), self._engine.connect() as conn:
            row = conn.execute(
                select(sessions).where(sessions.c.token == token)
            ).first()
        if row is None:
            return None
        return Session(
            token=row.token,
            username=row.username,
            last_activity_at=datetime.fromisoformat(row.last_activity_at),
        )

    @staticmethod
    def _row_values(session: Session) -> dict:
        return {
            "username": session.username,
            "last_activity_at": session.last_activity_at.isoformat(),
        }

    def add(self, session: Session) -> None:
        with storage_errors(), self._engine.begin() as conn:
            conn.execute(
                insert(sessions).values(token=session.token, **self._row_values(session))
            )

    def save(self, session: Session) -> None:
        """Refresh the activity time of a stored session.

        A token deleted meanwhile (sign-out, expiry) is not recreated;
        saving a signed-out session removes it.
        """
        if not session.is_signed_in or session.last_activity_at is None:
            self.delete(session.token)
            return

        with storage_errors(), self._engine.begin() as conn:
            conn.execute(
                update(sessions)
                .where(sessions.c.token == session.token)
                .values(**self._row_values(session))
            )

    def delete(self, token: str) -> None:
        with storage_errors(), self._engine.begin() as conn:
            conn.execute(delete(sessions).where(sessions.c.token == token))
