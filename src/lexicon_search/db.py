import asyncio
from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_scoped_session,
    async_sessionmaker,
    create_async_engine,
)

from lexicon_search.models import Base
from lexicon_search.models.search import DICTIONARY_FTS_STATEMENTS

# Module level state, keyed by database path
_engines: dict[str, AsyncEngine] = {}
_session_makers: dict[str, async_sessionmaker[AsyncSession]] = {}
_schema_initialized: dict[str, bool] = {}


class DatabaseType(Enum):
    """Types of supported databases."""

    MEMORY = auto()
    FILESYSTEM = auto()

    @classmethod
    def get_db_url(cls, db_path: Path, db_type: "DatabaseType") -> str:
        """Get SQLAlchemy URL for database path."""
        if db_type == cls.MEMORY:
            logger.info("Using in-memory SQLite database")
            return "sqlite+aiosqlite://"

        return f"sqlite+aiosqlite:///{db_path}"


def get_scoped_session_factory(
    session_maker: async_sessionmaker[AsyncSession],
) -> async_scoped_session:
    """Create a scoped session factory scoped to current task."""
    return async_scoped_session(session_maker, scopefunc=asyncio.current_task)


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a scoped session with proper lifecycle management.

    Args:
        session_maker: Session maker to create scoped sessions from
    """
    factory = get_scoped_session_factory(session_maker)
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await factory.remove()


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite's lower() and LIKE only fold ASCII letters
    dbapi_connection.create_function("casefold", 1, _casefold)


def _create_engine_and_session(
    db_path: Path, db_type: DatabaseType = DatabaseType.FILESYSTEM
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Internal helper to create engine and session maker."""
    db_url = DatabaseType.get_db_url(db_path, db_type)
    logger.debug(f"Creating engine for db_url: {db_url}")
    engine = create_async_engine(db_url, connect_args={"check_same_thread": False})
    event.listen(engine.sync_engine, "connect", _register_sqlite_functions)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return engine, session_maker


async def init_dictionary_schema(engine: AsyncEngine) -> None:
    """Create the dictionary tables, the full-text index and its triggers.

    Safe to call repeatedly; every statement is IF NOT EXISTS.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        for statement in DICTIONARY_FTS_STATEMENTS:
            await conn.execute(statement)
    logger.debug("Dictionary schema initialized")


async def get_or_create_db(
    db_path: Path,
    db_type: DatabaseType = DatabaseType.FILESYSTEM,
    ensure_schema: bool = True,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Get or create database engine and session maker for a specific database path."""
    db_key = str(db_path)

    if db_key not in _engines:
        if db_type == DatabaseType.FILESYSTEM:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        engine, session_maker = _create_engine_and_session(db_path, db_type)
        _engines[db_key] = engine
        _session_makers[db_key] = session_maker

    engine = _engines[db_key]
    session_maker = _session_makers[db_key]

    if ensure_schema and not _schema_initialized.get(db_key, False):
        await init_dictionary_schema(engine)
        _schema_initialized[db_key] = True
        logger.info(f"Database ready: {db_path}")

    return engine, session_maker


async def shutdown_db() -> None:
    """Clean up all database connections."""
    for db_key, engine in _engines.items():
        await engine.dispose()
        logger.debug(f"Disposed engine for: {db_key}")

    _engines.clear()
    _session_makers.clear()
    _schema_initialized.clear()


@asynccontextmanager
async def engine_session_factory(
    db_path: Path,
    db_type: DatabaseType = DatabaseType.MEMORY,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Create engine and session factory.

    Note: This is primarily used for testing where we want a fresh database
    for each test. For production use, use get_or_create_db() instead.
    """
    engine, session_maker = _create_engine_and_session(db_path, db_type)
    try:
        yield engine, session_maker
    finally:
        await engine.dispose()
