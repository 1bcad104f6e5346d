"""
Adapter: Account store.

Implements AccountRepository port on top of SQLAlchemy.
Each account is one row; trades are an append-only child table.
Updates are per-account compare-and-swap on the ``version`` column, so a
request working from a stale copy fails instead of overwriting a newer write.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.engine import Connection, Engine, Row
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from coinledger.domain.exchange.entities import Account, Currency, TradeRecord
from coinledger.domain.exchange.errors import (
    AccountExistsError,
    ConcurrentUpdateError,
    StorageUnavailableError,
)
from coinledger.domain.exchange.ports import AccountRepository
from coinledger.infrastructure.exchange.schema import accounts, trades

logger = logging.getLogger(__name__)

BALANCE_COLUMNS = {
    Currency.BTC: "balance_btc",
    Currency.ETH: "balance_eth",
    Currency.USD: "balance_usd",
}


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate driver failures into StorageUnavailableError."""
    try:
        yield
    except IntegrityError:
        raise
    except SQLAlchemyError as exc:
        logger.error("Account store failure: %s", type(exc).__name__)
        raise StorageUnavailableError(type(exc).__name__) from exc


def _account_values(account: Account) -> dict:
    values = {
        "username": account.username,
        "password_hash": account.password_hash,
        "created_at": account.created_at.isoformat(),
        "is_new_account": account.is_new_account,
    }
    for currency, column in BALANCE_COLUMNS.items():
        values[column] = str(account.balance(currency))
    return values


def _trade_values(username: str, seq: int, record: TradeRecord) -> dict:
    return {
        "username": username,
        "seq": seq,
        "coin": record.coin.value,
        "usd_amount": str(record.usd_amount),
        "coin_amount": str(record.coin_amount),
        "price_usd": str(record.price_usd),
        "executed_at": record.executed_at.isoformat(),
    }


def _row_to_trade(row: Row) -> TradeRecord:
    return TradeRecord(
        coin=Currency(row.coin),
        usd_amount=Decimal(row.usd_amount),
        coin_amount=Decimal(row.coin_amount),
        price_usd=Decimal(row.price_usd),
        executed_at=datetime.fromisoformat(row.executed_at),
    )


def _row_to_account(row: Row, history: list[TradeRecord]) -> Account:
    return Account(
        username=row.username,
        password_hash=row.password_hash,
        created_at=datetime.fromisoformat(row.created_at),
        is_new_account=bool(row.is_new_account),
        balances={
            currency: Decimal(getattr(row, column))
            for currency, column in BALANCE_COLUMNS.items()
        },
        transactions=history,
        version=row.version,
    )


class SqlAccountRepository(AccountRepository):
    """Persists accounts and their trade logs through a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, username: str) -> Optional[Account]:
        with storage_errors(), self._engine.connect() as conn:
            row = conn.execute(
                select(accounts).where(accounts.c.username == username)
            ).first()
            if row is None:
                return None
            history = conn.execute(
                select(trades)
                .where(trades.c.username == username)
                .order_by(trades.c.seq)
            ).all()
        return _row_to_account(row, [_row_to_trade(t) for t in history])

    def load(self) -> dict[str, Account]:
        with storage_errors(), self._engine.connect() as conn:
            rows = conn.execute(select(accounts)).all()
            history = conn.execute(
                select(trades).order_by(trades.c.username, trades.c.seq)
            ).all()

        by_user: dict[str, list[TradeRecord]] = {}
        for trade in history:
            by_user.setdefault(trade.username, []).append(_row_to_trade(trade))
        return {
            row.username: _row_to_account(row, by_user.get(row.username, []))
            for row in rows
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, account: Account) -> None:
        try:
            with storage_errors(), self._engine.begin() as conn:
                conn.execute(
                    insert(accounts).values(**_account_values(account), version=0)
                )
                self._append_trades(conn, account, already_stored=0)
        except IntegrityError:
            raise AccountExistsError(account.username) from None
        account.version = 0
        logger.debug("Inserted account username=%s", account.username)

    def update(self, account: Account) -> None:
        with storage_errors(), self._engine.begin() as conn:
            self._compare_and_swap(conn, account)
        account.version += 1

    def put(self, account: Account) -> None:
        with storage_errors(), self._engine.begin() as conn:
            self._put(conn, account)

    def save(self, accounts_to_save: Iterable[Account]) -> None:
        """Write all accounts in a single transaction."""
        with storage_errors(), self._engine.begin() as conn:
            for account in accounts_to_save:
                self._put(conn, account)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _put(self, conn: Connection, account: Account) -> None:
        stored = conn.execute(
            select(accounts.c.version).where(accounts.c.username == account.username)
        ).scalar()
        if stored is None:
            conn.execute(
                insert(accounts).values(**_account_values(account), version=0)
            )
            self._append_trades(conn, account, already_stored=0)
            account.version = 0
            return
        account.version = stored
        self._compare_and_swap(conn, account)
        account.version = stored + 1

    def _compare_and_swap(self, conn: Connection, account: Account) -> None:
        values = _account_values(account)
        del values["username"]
        result = conn.execute(
            update(accounts)
            .where(accounts.c.username == account.username)
            .where(accounts.c.version == account.version)
            .values(**values, version=account.version + 1)
        )
        if result.rowcount != 1:
            logger.warning(
                "Stale update rejected for username=%s version=%d",
                account.username,
                account.version,
            )
            raise ConcurrentUpdateError(account.username, account.version)

        stored = conn.execute(
            select(func.count())
            .select_from(trades)
            .where(trades.c.username == account.username)
        ).scalar_one()
        self._append_trades(conn, account, already_stored=stored)

    @staticmethod
    def _append_trades(conn: Connection, account: Account, already_stored: int) -> None:
        new_records = account.transactions[already_stored:]
        if not new_records:
            return
        conn.execute(
            insert(trades),
            [
                _trade_values(account.username, already_stored + offset, record)
                for offset, record in enumerate(new_records)
            ],
        )
