"""Common test fixtures.

Each test gets its own SQLite file under tmp_path with the dictionary table,
the FTS5 index and its triggers in place.
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from lexicon_search import db
from lexicon_search.config import DATABASE_NAME, LexiconSearchConfig
from lexicon_search.db import DatabaseType, engine_session_factory, init_dictionary_schema
from lexicon_search.models import DictionaryWord
from lexicon_search.repository import SQLiteDictionaryRepository


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def sample_word_rows() -> list[dict]:
    """Five entries across two lexicons, in three scripts."""
    return [
        dict(
            id="mw-1",
            origin="mw",
            word_index=1,
            word_lnum=101,
            word=[{"language": "sa", "value": "नमस्ते"}, {"language": "iast", "value": "namaste"}],
            description=[{"language": "en", "value": "salutation to you"}],
            attributes=[{"key": "pos", "value": "ind"}],
            phonetic="namaste",
            source_data={"audio": "namaste.mp3"},
            created_at=_utc(2024, 1, 10),
            updated_at=_utc(2024, 1, 10),
        ),
        dict(
            id="mw-2",
            origin="mw",
            word_index=2,
            word=[{"language": "sa", "value": "नमः"}, {"language": "iast", "value": "namaḥ"}],
            description=[{"language": "en", "value": "bow, obeisance"}],
            attributes=[],
            phonetic="namah",
            source_data=None,
            created_at=_utc(2024, 2, 10),
            updated_at=_utc(2024, 2, 10),
        ),
        dict(
            id="ap90-1",
            origin="ap90",
            word_index=1,
            word=[{"language": "sa", "value": "राम"}, {"language": "iast", "value": "rāma"}],
            description=[{"language": "en", "value": "pleasing, charming"}],
            attributes=[{"key": "pos", "value": "m"}],
            phonetic="rama",
            source_data={"audio": None},
            created_at=_utc(2024, 3, 10),
            updated_at=_utc(2024, 3, 10),
        ),
        dict(
            id="ap90-2",
            origin="ap90",
            word_index=2,
            word=[{"language": "te", "value": "రామ"}],
            description=[{"language": "en", "value": "Rama in Telugu script"}],
            attributes=[],
            phonetic="rama",
            source_data={"audio": "rama-te.mp3"},
            created_at=_utc(2024, 4, 10),
            updated_at=_utc(2024, 4, 10),
        ),
        dict(
            id="mw-3",
            origin="mw",
            word_index=3,
            word=[{"language": "sa", "value": "कमल"}, {"language": "iast", "value": "kamala"}],
            description=[{"language": "en", "value": "lotus"}],
            attributes=[{"key": "pos", "value": "n"}],
            phonetic="kamala",
            source_data={},
            created_at=_utc(2024, 5, 10),
            updated_at=_utc(2024, 5, 10),
        ),
    ]


async def populate_database(session_maker: async_sessionmaker[AsyncSession]) -> None:
    async with db.scoped_session(session_maker) as session:
        session.add_all([DictionaryWord(**row) for row in sample_word_rows()])


@pytest.fixture
def app_config(tmp_path: Path) -> LexiconSearchConfig:
    return LexiconSearchConfig(home=tmp_path, log_level="ERROR")


@pytest_asyncio.fixture(scope="function")
async def engine_factory(
    tmp_path: Path,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Create a fresh SQLite file database with the dictionary schema."""
    db_path = tmp_path / "test.db"
    async with engine_session_factory(db_path, DatabaseType.FILESYSTEM) as (engine, session_maker):
        await init_dictionary_schema(engine)
        yield engine, session_maker


@pytest_asyncio.fixture
async def session_maker(engine_factory) -> async_sessionmaker[AsyncSession]:
    _, session_maker = engine_factory
    return session_maker


@pytest_asyncio.fixture
async def dictionary_repository(session_maker, app_config) -> SQLiteDictionaryRepository:
    return SQLiteDictionaryRepository(session_maker, app_config=app_config)


@pytest_asyncio.fixture
async def sample_words(session_maker) -> list[dict]:
    """Insert the sample entries and return their row data."""
    await populate_database(session_maker)
    return sample_word_rows()


@pytest.fixture
def cli_home(tmp_path: Path, monkeypatch) -> Path:
    """Point the CLI at a populated database under tmp_path."""
    monkeypatch.setenv("LEXICON_SEARCH_HOME", str(tmp_path))
    monkeypatch.setenv("LEXICON_SEARCH_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("LEXICON_SEARCH_LOG_LEVEL", "ERROR")

    async def _setup() -> None:
        db_path = tmp_path / DATABASE_NAME
        async with engine_session_factory(db_path, DatabaseType.FILESYSTEM) as (engine, maker):
            await init_dictionary_schema(engine)
            await populate_database(maker)

    asyncio.run(_setup())
    return tmp_path
