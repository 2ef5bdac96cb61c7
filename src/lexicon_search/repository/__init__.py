from lexicon_search.repository.dictionary_repository import (
    DatabaseResult,
    DateBounds,
    DictionaryRepository,
    RepositoryQuery,
    row_to_entry,
)
from lexicon_search.repository.sqlite_dictionary_repository import SQLiteDictionaryRepository

__all__ = [
    "DatabaseResult",
    "DateBounds",
    "DictionaryRepository",
    "RepositoryQuery",
    "SQLiteDictionaryRepository",
    "row_to_entry",
]
