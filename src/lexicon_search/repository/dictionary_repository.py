"""Repository interface for dictionary lookups.

Two retrieval paths are exposed: a pattern path (find_words/count_words),
which matches a case-insensitive substring against headword renderings, and a
full-text path (aggregate_search) that ranks by the backend's text relevance
metric. Both apply the same filter vocabulary via RepositoryQuery.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lexicon_search.schemas.dictionary import DictionaryEntry

RepositorySortBy = Literal["word_index", "phonetic", "relevance", "word_length"]
RepositorySortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class DateBounds:
    """Inclusive creation-date bounds; either side may be open."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass
class RepositoryQuery:
    """Backend-facing query. Unset fields are None and add no condition."""

    limit: int
    offset: int
    query_text: Optional[str] = None
    origins: Optional[List[str]] = None
    language: Optional[str] = None
    word_length_min: Optional[int] = None
    word_length_max: Optional[int] = None
    has_audio: Optional[bool] = None
    has_attributes: Optional[bool] = None
    date_range: Optional[DateBounds] = None
    sort_by: Optional[RepositorySortBy] = None
    sort_order: Optional[RepositorySortOrder] = None


@dataclass
class DatabaseResult:
    """One page of entries plus the total matching count."""

    data: List[DictionaryEntry]
    total: int
    has_more: bool
    # Backend full-text metric per entry id, higher is better
    scores: Dict[str, float] = field(default_factory=dict)


def _load_json(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def row_to_entry(row: Mapping[str, Any]) -> DictionaryEntry:
    """Convert a raw dictionary_word row into a DictionaryEntry.

    JSON columns arrive as text from raw SQL and timestamps as ISO strings.
    """
    return DictionaryEntry(
        id=row["id"],
        origin=row["origin"],
        word_index=row["word_index"],
        word_lnum=row["word_lnum"] or 0,
        word=_load_json(row["word"]) or [],
        description=_load_json(row["description"]) or [],
        attributes=_load_json(row["attributes"]) or [],
        phonetic=row["phonetic"] or "",
        source_data=_load_json(row["source_data"]),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row["updated_at"]),
    )


class DictionaryRepository(ABC):
    """Abstract read access to dictionary entries."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @abstractmethod
    async def find_words(self, query: RepositoryQuery) -> DatabaseResult:
        """Pattern search over headword values with filters, sort and pagination."""

    @abstractmethod
    async def count_words(self, query: RepositoryQuery) -> int:
        """Count entries matching the same filters as find_words."""

    @abstractmethod
    async def aggregate_search(self, query: RepositoryQuery) -> DatabaseResult:
        """Full-text search ranked by the backend relevance metric."""

    @abstractmethod
    async def find_by_id(self, entry_id: str) -> Optional[DictionaryEntry]:
        """Fetch one entry, or None when the id does not exist."""
