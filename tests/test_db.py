"""Tests for engine/session helpers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from schema_sync import db
from schema_sync.config import SchemaSyncConfig


def test_postgres_url():
    config = SchemaSyncConfig(
        pg_host="db.internal", pg_port=6543, pg_database="docs", pg_user="reader", pg_password="pw"
    )

    url = db.get_postgres_url(config)

    assert url.drivername == "postgresql+asyncpg"
    assert url.host == "db.internal"
    assert url.port == 6543
    assert url.database == "docs"
    assert url.username == "reader"
    assert url.password == "pw"


def test_postgres_url_without_password():
    assert db.get_postgres_url(SchemaSyncConfig(pg_password="")).password is None


def test_sqlite_url(tmp_path):
    assert db.get_sqlite_url(tmp_path / "index.db") == f"sqlite+aiosqlite:///{tmp_path / 'index.db'}"


@pytest.mark.asyncio
async def test_scoped_session_commits_and_closes():
    session = AsyncMock()

    async with db.scoped_session(MagicMock(return_value=session)):
        pass

    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()
    session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_scoped_session_rolls_back_on_error():
    session = AsyncMock()

    with pytest.raises(RuntimeError):
        async with db.scoped_session(MagicMock(return_value=session)):
            raise RuntimeError("boom")

    session.commit.assert_not_awaited()
    session.rollback.assert_awaited_once()
    session.close.assert_awaited_once()
