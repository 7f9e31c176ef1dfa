"""Tests for src/storage/engine.py."""

from __future__ import annotations

from unittest.mock import MagicMock

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from src.storage.engine import create_db_engine, normalize_database_url, ping


class TestNormalizeDatabaseUrl:
    """Tests for database URL rewriting."""

    def test_postgres_scheme(self) -> None:
        """Hosted ``postgres://`` URLs should use the psycopg dialect."""
        assert normalize_database_url("postgres://u:p@db/pets") == (
            "postgresql+psycopg://u:p@db/pets"
        )

    def test_postgresql_scheme(self) -> None:
        """Plain ``postgresql://`` URLs should use the psycopg dialect."""
        assert normalize_database_url("postgresql://u:p@db/pets") == (
            "postgresql+psycopg://u:p@db/pets"
        )

    def test_other_urls_unchanged(self) -> None:
        """SQLite and explicit-driver URLs are left alone."""
        assert normalize_database_url("sqlite:///pets.db") == "sqlite:///pets.db"
        assert normalize_database_url("postgresql+psycopg://db/pets") == (
            "postgresql+psycopg://db/pets"
        )


class TestPing:
    """Tests for the database health check."""

    def test_reachable(self, engine: Engine) -> None:
        """A live database answers the ping."""
        assert ping(engine) is True

    def test_unreachable(self) -> None:
        """Connection errors are reported as False, not raised."""
        broken = MagicMock()
        broken.connect.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        assert ping(broken) is False

    def test_create_sqlite_engine(self) -> None:
        """create_db_engine should yield a usable engine."""
        engine = create_db_engine("sqlite://")
        try:
            assert ping(engine) is True
        finally:
            engine.dispose()
