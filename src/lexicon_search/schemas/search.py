"""Search request and response schemas.

These are the types that cross the service boundary: callers build a
SearchOptions (usually with a UserFilter decoded from a URL), and get back a
ServiceResponse wrapping a SearchResult. Nothing raises across this boundary;
failures come back as ServiceError.
"""

from datetime import datetime
from enum import Enum
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from lexicon_search.schemas.dictionary import DictionaryEntry
from lexicon_search.text.highlight import HighlightSegment


class SortBy(str, Enum):
    """User-facing sort options."""

    RELEVANCE = "relevance"
    ALPHABETICAL = "alphabetical"
    WORD_LENGTH = "word_length"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class MatchType(str, Enum):
    """How a query matched an entry, strongest first."""

    EXACT = "exact"
    PREFIX = "prefix"
    PHONETIC = "phonetic"
    FUZZY = "fuzzy"


class DateRange(BaseModel):
    """Creation-date window. Either bound may be open."""

    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_set(self) -> bool:
        return self.start is not None or self.end is not None


class UserFilter(BaseModel):
    """User-facing filter state, serializable to URL parameters.

    The model accepts any values; use FilterService.validate_filters to
    enforce positive lengths and ordered ranges.
    """

    model_config = ConfigDict(frozen=True)

    origins: List[str] = Field(default_factory=list, description="Source lexicons to include")
    language: Optional[str] = None
    word_length_min: Optional[int] = None
    word_length_max: Optional[int] = None
    has_audio: Optional[bool] = None
    has_attributes: Optional[bool] = None
    date_range: DateRange = Field(default_factory=DateRange)


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)


class SearchOptions(BaseModel):
    """Input to SearchService.perform_search."""

    query_text: str = ""
    filters: UserFilter = Field(default_factory=UserFilter)
    sort_by: SortBy = SortBy.RELEVANCE
    sort_direction: SortDirection = SortDirection.DESC
    pagination: Pagination = Field(default_factory=Pagination)
    highlight: bool = Field(
        default=False, description="Attach highlight segments for the first word and gloss"
    )


class ScoreBreakdown(BaseModel):
    text_score: int = 0
    prefix_bonus: int = 0
    exact_bonus: int = 0


class SearchMetadata(BaseModel):
    query_language: str
    matched_language: str
    score_breakdown: ScoreBreakdown
    backend_score: Optional[float] = Field(
        default=None, description="Full-text rank from the store, higher is better"
    )


class SearchResultItem(DictionaryEntry):
    """A dictionary entry with its computed relevance."""

    relevance_score: int = Field(..., ge=0, le=100)
    match_type: MatchType
    highlighted_word: Optional[List[HighlightSegment]] = None
    highlighted_description: Optional[List[HighlightSegment]] = None
    search_metadata: Optional[SearchMetadata] = None


class SearchResult(BaseModel):
    """One page of scored results."""

    results: List[SearchResultItem]
    total: int
    has_more: bool
    next_offset: Optional[int] = None


T = TypeVar("T")


class ServiceSuccess(BaseModel, Generic[T]):
    status: Literal["success"] = "success"
    data: T


class ServiceError(BaseModel):
    status: Literal["error"] = "error"
    error: str
    details: Optional[str] = None


type ServiceResponse[R] = ServiceSuccess[R] | ServiceError
