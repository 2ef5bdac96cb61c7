"""SQLite implementation of the dictionary repository.

The pattern path filters dictionary_word directly, reaching into the JSON
columns with json_each/json_extract. The full-text path goes through the
dictionary_word_fts FTS5 table and ranks with bm25().
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import text

from lexicon_search import db
from lexicon_search.config import LexiconSearchConfig
from lexicon_search.models.search import FTS_BM25_WEIGHTS
from lexicon_search.repository.dictionary_repository import (
    DatabaseResult,
    DictionaryRepository,
    RepositoryQuery,
    row_to_entry,
)
from lexicon_search.schemas.dictionary import DictionaryEntry
from lexicon_search.utils import escape_like

FULL_TEXT_MIN_QUERY_LENGTH = 2

ENTRY_COLUMNS = """
    dictionary_word.id,
    dictionary_word.origin,
    dictionary_word.word_index,
    dictionary_word.word_lnum,
    dictionary_word.word,
    dictionary_word.description,
    dictionary_word.attributes,
    dictionary_word.phonetic,
    dictionary_word.source_data,
    dictionary_word.created_at,
    dictionary_word.updated_at
"""

# Only these two strings ever reach the ORDER BY clause
SORT_DIRECTIONS = {"asc": "ASC", "desc": "DESC"}

# Stored timestamps are naive UTC in SQLAlchemy's SQLite format
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIMESTAMP_FORMAT)


class SQLiteDictionaryRepository(DictionaryRepository):
    """SQLite/FTS5 dictionary repository.

    Uses:
    - LIKE over casefold()ed json_each(word) values for substring matching
    - FTS5 MATCH with bm25() for full-text relevance
    - quoted prefix terms so user input never becomes FTS syntax
    """

    def __init__(self, session_maker, app_config: Optional[LexiconSearchConfig] = None):
        super().__init__(session_maker)
        self._full_text_min_query_length = (
            app_config.full_text_min_query_length if app_config else FULL_TEXT_MIN_QUERY_LENGTH
        )

    @staticmethod
    def _origins_condition(origins: List[str], params: Dict[str, Any]) -> str:
        placeholders = []
        for i, origin in enumerate(origins):
            params[f"origin_{i}"] = origin
            placeholders.append(f":origin_{i}")
        return f"dictionary_word.origin IN ({', '.join(placeholders)})"

    def _build_conditions(self, query: RepositoryQuery) -> Tuple[List[str], Dict[str, Any]]:
        """Translate the query filters into WHERE conditions and bind params."""
        conditions: List[str] = []
        params: Dict[str, Any] = {}

        if query.origins:
            conditions.append(self._origins_condition(query.origins, params))

        if query.query_text:
            # casefold() is registered per connection in db.py
            params["pattern"] = f"%{escape_like(query.query_text.casefold())}%"
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(dictionary_word.word) AS w "
                "WHERE casefold(json_extract(w.value, '$.value')) LIKE :pattern ESCAPE '\\')"
            )

        if query.language:
            params["language"] = query.language
            conditions.append(
                "EXISTS (SELECT 1 FROM json_each(dictionary_word.word) AS wl "
                "WHERE json_extract(wl.value, '$.language') = :language)"
            )

        if query.word_length_min is not None:
            params["word_length_min"] = query.word_length_min
            conditions.append("length(dictionary_word.phonetic) >= :word_length_min")

        if query.word_length_max is not None:
            params["word_length_max"] = query.word_length_max
            conditions.append("length(dictionary_word.phonetic) <= :word_length_max")

        if query.has_attributes is True:
            conditions.append("json_array_length(coalesce(dictionary_word.attributes, '[]')) > 0")
        elif query.has_attributes is False:
            conditions.append("json_array_length(coalesce(dictionary_word.attributes, '[]')) = 0")

        if query.has_audio is True:
            conditions.append("json_extract(dictionary_word.source_data, '$.audio') IS NOT NULL")
        elif query.has_audio is False:
            conditions.append("json_extract(dictionary_word.source_data, '$.audio') IS NULL")

        if query.date_range:
            if query.date_range.start:
                params["date_start"] = _format_timestamp(query.date_range.start)
                conditions.append("dictionary_word.created_at >= :date_start")
            if query.date_range.end:
                params["date_end"] = _format_timestamp(query.date_range.end)
                conditions.append("dictionary_word.created_at <= :date_end")

        return conditions, params

    @staticmethod
    def _order_by(query: RepositoryQuery, full_text: bool = False) -> str:
        direction = SORT_DIRECTIONS.get(query.sort_order or "asc", "ASC")

        if query.sort_by == "phonetic":
            return f"dictionary_word.phonetic {direction}, dictionary_word.word_index ASC"
        if query.sort_by == "word_length":
            return f"length(dictionary_word.phonetic) {direction}, dictionary_word.word_index ASC"
        if query.sort_by == "relevance":
            # bm25() is lower for better matches
            if full_text:
                return "score ASC, dictionary_word.word_index ASC"
            return "dictionary_word.word_index ASC"
        return f"dictionary_word.word_index {direction}"

    @staticmethod
    def _prepare_match_query(query_text: str) -> str:
        """Quote each whitespace-separated term as an FTS5 prefix string.

        Terms are OR-ed; bm25 ranks entries matching more terms higher.
        Terms without any letter or digit would tokenize to nothing and are dropped.
        """
        terms = []
        for term in query_text.split():
            if not any(ch.isalnum() for ch in term):
                continue
            escaped = term.replace('"', '""')
            terms.append(f'"{escaped}"*')
        return " OR ".join(terms)

    @staticmethod
    def _where(conditions: List[str]) -> str:
        return " AND ".join(conditions) if conditions else "1=1"

    @staticmethod
    def _has_more(query: RepositoryQuery, returned: int, total: int) -> bool:
        return query.offset + returned < total

    async def find_words(self, query: RepositoryQuery) -> DatabaseResult:
        conditions, params = self._build_conditions(query)
        where_clause = self._where(conditions)

        count_sql = f"SELECT count(*) FROM dictionary_word WHERE {where_clause}"
        fetch_sql = f"""
            SELECT {ENTRY_COLUMNS}
            FROM dictionary_word
            WHERE {where_clause}
            ORDER BY {self._order_by(query)}
            LIMIT :limit
            OFFSET :offset
        """
        fetch_params = {**params, "limit": query.limit, "offset": query.offset}

        logger.trace(f"find_words {fetch_sql} params: {fetch_params}")
        async with db.scoped_session(self.session_maker) as session:
            total = (await session.execute(text(count_sql), params)).scalar_one()
            rows = (await session.execute(text(fetch_sql), fetch_params)).mappings().all()

        data = [row_to_entry(row) for row in rows]
        logger.debug(f"find_words matched {total} entries, returning {len(data)}")
        return DatabaseResult(
            data=data,
            total=total,
            has_more=self._has_more(query, len(data), total),
        )

    async def count_words(self, query: RepositoryQuery) -> int:
        conditions, params = self._build_conditions(query)
        sql = f"SELECT count(*) FROM dictionary_word WHERE {self._where(conditions)}"

        logger.trace(f"count_words {sql} params: {params}")
        async with db.scoped_session(self.session_maker) as session:
            return (await session.execute(text(sql), params)).scalar_one()

    async def aggregate_search(self, query: RepositoryQuery) -> DatabaseResult:
        """Full-text search over headwords, phonetic forms and glosses.

        Queries shorter than the full-text minimum fall back to find_words.
        Only the origins filter is combined with the text match.
        """
        search_text = query.query_text or ""
        if len(search_text) < self._full_text_min_query_length:
            return await self.find_words(query)

        match_query = self._prepare_match_query(search_text)
        if not match_query:
            return await self.find_words(query)

        conditions = ["dictionary_word_fts MATCH :match"]
        params: Dict[str, Any] = {"match": match_query}
        if query.origins:
            conditions.append(self._origins_condition(query.origins, params))

        from_clause = (
            "dictionary_word_fts "
            "JOIN dictionary_word ON dictionary_word.id = dictionary_word_fts.word_id"
        )
        where_clause = self._where(conditions)

        count_sql = f"SELECT count(*) FROM {from_clause} WHERE {where_clause}"
        fetch_sql = f"""
            SELECT {ENTRY_COLUMNS},
                bm25(dictionary_word_fts, {FTS_BM25_WEIGHTS}) AS score
            FROM {from_clause}
            WHERE {where_clause}
            ORDER BY {self._order_by(query, full_text=True)}
            LIMIT :limit
            OFFSET :offset
        """
        fetch_params = {**params, "limit": query.limit, "offset": query.offset}

        logger.trace(f"aggregate_search {fetch_sql} params: {fetch_params}")
        try:
            async with db.scoped_session(self.session_maker) as session:
                total = (await session.execute(text(count_sql), params)).scalar_one()
                rows = (await session.execute(text(fetch_sql), fetch_params)).mappings().all()
        except Exception as e:
            logger.error(f"Database error during full-text search for {search_text!r}: {e}")
            raise

        data = [row_to_entry(row) for row in rows]
        scores = {row["id"]: -float(row["score"]) for row in rows}
        logger.debug(f"aggregate_search matched {total} entries, returning {len(data)}")
        return DatabaseResult(
            data=data,
            total=total,
            has_more=self._has_more(query, len(data), total),
            scores=scores,
        )

    async def find_by_id(self, entry_id: str) -> Optional[DictionaryEntry]:
        sql = f"SELECT {ENTRY_COLUMNS} FROM dictionary_word WHERE dictionary_word.id = :id"
        async with db.scoped_session(self.session_maker) as session:
            row = (await session.execute(text(sql), {"id": entry_id})).mappings().first()
        return row_to_entry(row) if row else None
