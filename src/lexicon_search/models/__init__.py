"""Models package for lexicon-search."""

from lexicon_search.models.base import Base
from lexicon_search.models.dictionary import DictionaryWord

__all__ = [
    "Base",
    "DictionaryWord",
]
