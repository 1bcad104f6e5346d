"""
Database schema for the account and session stores.

Monetary amounts are stored as text so Decimal values round-trip exactly.
Timestamps are stored as ISO-8601 text in UTC.
"""

import logging

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from coinledger.domain.exchange.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

metadata = MetaData()

accounts = Table(
    "accounts",
    metadata,
    Column("username", String(64), primary_key=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(40), nullable=False),
    Column("is_new_account", Boolean, nullable=False),
    Column("balance_btc", Text, nullable=False),
    Column("balance_eth", Text, nullable=False),
    Column("balance_usd", Text, nullable=False),
    Column("version", Integer, nullable=False, default=0),
)

trades = Table(
    "trades",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "username",
        String(64),
        ForeignKey("accounts.username"),
        nullable=False,
        index=True,
    ),
    Column("seq", Integer, nullable=False),
    Column("coin", String(8), nullable=False),
    Column("usd_amount", Text, nullable=False),
    Column("coin_amount", Text, nullable=False),
    Column("price_usd", Text, nullable=False),
    Column("executed_at", String(40), nullable=False),
)

sessions = Table(
    "sessions",
    metadata,
    Column("token", String(128), primary_key=True),
    Column("username", String(64), nullable=False),
    Column("last_activity_at", String(40), nullable=False),
)


def build_engine(database_url: str) -> Engine:
    """Build a SQLAlchemy engine usable from FastAPI's worker threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def create_schema(engine: Engine) -> None:
    """Create any missing tables.

    Raises:
        StorageUnavailableError: If the database cannot be reached.
    """
    try:
        metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise StorageUnavailableError(type(exc).__name__) from exc
    logger.info("Database schema ready.")
