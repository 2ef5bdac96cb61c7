"""utility functions for commands"""

import asyncio
from typing import Coroutine, TypeVar

from lexicon_search import db
from lexicon_search.config import LexiconSearchConfig
from lexicon_search.repository import SQLiteDictionaryRepository

T = TypeVar("T")


def run_with_cleanup(coro: Coroutine[None, None, T]) -> T:
    """Run a coroutine to completion, then dispose of any open database engines."""

    async def _run() -> T:
        try:
            return await coro
        finally:
            await db.shutdown_db()

    return asyncio.run(_run())


async def get_repository(app_config: LexiconSearchConfig) -> SQLiteDictionaryRepository:
    """Open the configured database, creating its schema on first use."""
    _, session_maker = await db.get_or_create_db(
        db_path=app_config.database_path,
        db_type=db.DatabaseType.FILESYSTEM,
    )
    return SQLiteDictionaryRepository(session_maker, app_config=app_config)
