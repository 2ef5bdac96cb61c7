"""Pydantic schemas for dictionary entries and search requests/responses."""

from lexicon_search.schemas.dictionary import AttributeValue, DictionaryEntry, LanguageValue
from lexicon_search.schemas.search import (
    DateRange,
    MatchType,
    Pagination,
    ScoreBreakdown,
    SearchMetadata,
    SearchOptions,
    SearchResult,
    SearchResultItem,
    ServiceError,
    ServiceResponse,
    ServiceSuccess,
    SortBy,
    SortDirection,
    UserFilter,
)

__all__ = [
    "AttributeValue",
    "DateRange",
    "DictionaryEntry",
    "LanguageValue",
    "MatchType",
    "Pagination",
    "ScoreBreakdown",
    "SearchMetadata",
    "SearchOptions",
    "SearchResult",
    "SearchResultItem",
    "ServiceError",
    "ServiceResponse",
    "ServiceSuccess",
    "SortBy",
    "SortDirection",
    "UserFilter",
]
