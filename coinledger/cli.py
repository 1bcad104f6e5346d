"""
CLI entry point for CoinLedger.

Usage:
    # Create the account, trade and session tables
    python -m coinledger.cli init-db

    # Serve the HTTP API
    python -m coinledger.cli serve --port 8000
"""

import argparse
import logging
from typing import Optional, Sequence

from coinledger.core.config import settings
from coinledger.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create the storage schema if it does not exist yet."""
    from coinledger.infrastructure.exchange.schema import build_engine, create_schema

    engine = build_engine(args.database_url)
    try:
        create_schema(engine)
    finally:
        engine.dispose()


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI application under uvicorn."""
    import uvicorn

    logger.info("Starting %s at http://%s:%d", settings.project_name, args.host, args.port)
    uvicorn.run("coinledger.main:app", host=args.host, port=args.port, reload=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CoinLedger simulated exchange CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create the storage schema")
    init_parser.add_argument(
        "--database-url", default=settings.database_url, dest="database_url",
        help="SQLAlchemy URL of the store (defaults to COINLEDGER_DATABASE_URL)",
    )
    init_parser.set_defaults(func=cmd_init_db)

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_logging(level=settings.log_level)
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
