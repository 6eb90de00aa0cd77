from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from schema_sync.config import SchemaSyncConfig


class DatabaseType(Enum):
    """Types of supported documentation stores."""

    POSTGRES = auto()
    SQLITE = auto()


def get_postgres_url(config: SchemaSyncConfig) -> URL:
    """Build the asyncpg URL for the structured docs store."""
    return URL.create(
        "postgresql+asyncpg",
        username=config.pg_user,
        password=config.pg_password.get_secret_value() or None,
        host=config.pg_host,
        port=config.pg_port,
        database=config.pg_database,
    )


def get_sqlite_url(db_path: Path) -> str:
    """Get SQLAlchemy URL for an SQLite index file."""
    return f"sqlite+aiosqlite:///{db_path}"


def create_engine_and_session(
    db_url: URL | str, db_type: DatabaseType
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and session maker for one documentation store."""
    logger.debug(f"Creating {db_type.name.lower()} engine")
    if db_type == DatabaseType.SQLITE:
        engine = create_async_engine(db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_async_engine(db_url, pool_pre_ping=True)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return engine, session_maker


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a session with proper lifecycle management.

    Args:
        session_maker: Session maker to create sessions from
    """
    session = session_maker()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
