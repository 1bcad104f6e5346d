"""Tests for the command-line entry point."""

from unittest.mock import patch

import pytest
from sqlalchemy import inspect

from coinledger.cli import build_parser, main
from coinledger.infrastructure.exchange.schema import build_engine


class TestCli:
    def test_init_db_creates_tables(self, tmp_path) -> None:
        url = f"sqlite:///{tmp_path / 'fresh.db'}"
        main(["init-db", "--database-url", url])
        engine = build_engine(url)
        assert {"accounts", "trades", "sessions"} <= set(inspect(engine).get_table_names())
        engine.dispose()

    def test_serve_runs_uvicorn(self) -> None:
        with patch("uvicorn.run") as run:
            main(["serve", "--port", "9001"])
        run.assert_called_once_with(
            "coinledger.main:app", host="127.0.0.1", port=9001, reload=False
        )

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
