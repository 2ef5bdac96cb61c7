"""Filter validation, URL serialization and query building.

All operations are pure and live as static methods on FilterService. The
URL encoding keeps camelCase keys so links stay stable:

    origins=mw,ap90&language=sa&wordLengthMin=5&hasAudio=true&dateStart=<ISO8601>
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import parse_qs, urlencode

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

from lexicon_search.repository.dictionary_repository import (
    DateBounds,
    RepositoryQuery,
    RepositorySortBy,
    RepositorySortOrder,
)
from lexicon_search.schemas.search import DateRange, Pagination, UserFilter

NO_FILTERS_WARNING = "No filters applied - showing all results"
WORD_LENGTH_ORDER_ERROR = "Word length minimum cannot be greater than maximum"
DATE_RANGE_ORDER_ERROR = "Date range start cannot be after end"

# camelCase keys accepted from URL-shaped input, mapped to model fields
CAMEL_TO_SNAKE = {
    "wordLengthMin": "word_length_min",
    "wordLengthMax": "word_length_max",
    "hasAudio": "has_audio",
    "hasAttributes": "has_attributes",
    "dateRange": "date_range",
}


@dataclass
class FilterValidationResult:
    """Outcome of validate_filters. Warnings never make a filter invalid."""

    is_valid: bool
    errors: list[str] = dataclass_field(default_factory=list)
    warnings: list[str] = dataclass_field(default_factory=list)


class _StrictDateRange(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")

    start: Optional[datetime] = None
    end: Optional[datetime] = None


class _StrictUserFilter(BaseModel):
    """Type-checking twin of UserFilter: no coercion, positive lengths."""

    model_config = ConfigDict(strict=True, extra="ignore")

    origins: List[str] = Field(default_factory=list)
    language: Optional[str] = None
    word_length_min: Optional[PositiveInt] = None
    word_length_max: Optional[PositiveInt] = None
    has_audio: Optional[bool] = None
    has_attributes: Optional[bool] = None


def _normalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    data = {CAMEL_TO_SNAKE.get(key, key): value for key, value in raw.items()}
    # None for a nested object means "not set", same as absent
    if data.get("date_range") is None:
        data.pop("date_range", None)
    elif isinstance(data["date_range"], BaseModel):
        data["date_range"] = data["date_range"].model_dump()
    if data.get("origins") is None:
        data.pop("origins", None)
    return data


def _comparable(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC so mixed bounds still compare
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _format_error(error: Mapping[str, Any], prefix: Optional[str] = None) -> str:
    loc = tuple(error["loc"])
    if prefix:
        loc = (prefix, *loc)
    path = ".".join(str(part) for part in loc) or "filters"
    return f"{path}: {error['msg']}"


def _first(params: Mapping[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        parsed = int(value.strip())
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring invalid date filter value: {value!r}")
        return None


class FilterService:
    """Stateless filter operations."""

    @staticmethod
    def validate_filters(filters: Union[UserFilter, Mapping[str, Any]]) -> FilterValidationResult:
        """Check types first, then the ordering rules between related fields.

        Accepts a UserFilter or a plain mapping using snake_case or camelCase
        keys. Type errors are reported as "<field.path>: <message>".
        """
        if isinstance(filters, UserFilter):
            raw = filters.model_dump()
        elif isinstance(filters, Mapping):
            raw = _normalize_keys(filters)
        else:
            return FilterValidationResult(
                is_valid=False, errors=[f"filters: expected a mapping, got {type(filters).__name__}"]
            )

        raw_date_range = raw.pop("date_range", None) or {}
        errors: list[str] = []
        try:
            checked = _StrictUserFilter.model_validate(raw)
        except ValidationError as e:
            errors.extend(_format_error(error) for error in e.errors())
        try:
            date_range = _StrictDateRange.model_validate(raw_date_range)
        except ValidationError as e:
            errors.extend(_format_error(error, prefix="date_range") for error in e.errors())
        if errors:
            return FilterValidationResult(is_valid=False, errors=errors)

        if (
            checked.word_length_min is not None
            and checked.word_length_max is not None
            and checked.word_length_min > checked.word_length_max
        ):
            return FilterValidationResult(is_valid=False, errors=[WORD_LENGTH_ORDER_ERROR])

        start, end = date_range.start, date_range.end
        if start is not None and end is not None and _comparable(start) > _comparable(end):
            return FilterValidationResult(is_valid=False, errors=[DATE_RANGE_ORDER_ERROR])

        warnings = []
        normalized = UserFilter(
            **checked.model_dump(), date_range=DateRange(start=start, end=end)
        )
        if FilterService.is_empty_filter(normalized):
            warnings.append(NO_FILTERS_WARNING)

        return FilterValidationResult(is_valid=True, warnings=warnings)

    @staticmethod
    def build_query(
        filters: UserFilter,
        pagination: Pagination,
        sort_by: Optional[RepositorySortBy] = None,
        sort_order: Optional[RepositorySortOrder] = None,
    ) -> RepositoryQuery:
        """Map user-facing filters onto a RepositoryQuery without query text."""
        date_range = None
        if filters.date_range.is_set:
            date_range = DateBounds(start=filters.date_range.start, end=filters.date_range.end)

        return RepositoryQuery(
            limit=pagination.limit,
            offset=pagination.offset,
            origins=list(filters.origins),
            language=filters.language,
            word_length_min=filters.word_length_min,
            word_length_max=filters.word_length_max,
            has_audio=filters.has_audio,
            has_attributes=filters.has_attributes,
            date_range=date_range,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    @staticmethod
    def serialize_filters(filters: UserFilter) -> str:
        params = []
        if filters.origins:
            params.append(("origins", ",".join(filters.origins)))
        if filters.language:
            params.append(("language", filters.language))
        if filters.word_length_min is not None:
            params.append(("wordLengthMin", str(filters.word_length_min)))
        if filters.word_length_max is not None:
            params.append(("wordLengthMax", str(filters.word_length_max)))
        if filters.has_audio is not None:
            params.append(("hasAudio", "true" if filters.has_audio else "false"))
        if filters.has_attributes is not None:
            params.append(("hasAttributes", "true" if filters.has_attributes else "false"))
        if filters.date_range.start:
            params.append(("dateStart", filters.date_range.start.isoformat()))
        if filters.date_range.end:
            params.append(("dateEnd", filters.date_range.end.isoformat()))
        return urlencode(params)

    @staticmethod
    def deserialize_from_url(search_params: Union[str, Mapping[str, Any]]) -> UserFilter:
        """Restore a UserFilter from a query string or a mapping of parameters.

        Malformed values are dropped rather than reported: non-positive or
        non-numeric lengths and unparsable dates come back as None.
        """
        if isinstance(search_params, str):
            params: Mapping[str, Any] = parse_qs(
                search_params.lstrip("?"), keep_blank_values=True
            )
        else:
            params = search_params

        origins_param = _first(params, "origins")
        origins = [origin for origin in origins_param.split(",") if origin] if origins_param else []

        has_audio = _first(params, "hasAudio")
        has_attributes = _first(params, "hasAttributes")

        return UserFilter(
            origins=origins,
            language=_first(params, "language") or None,
            word_length_min=_parse_positive_int(_first(params, "wordLengthMin")),
            word_length_max=_parse_positive_int(_first(params, "wordLengthMax")),
            has_audio=None if has_audio is None else has_audio == "true",
            has_attributes=None if has_attributes is None else has_attributes == "true",
            date_range=DateRange(
                start=_parse_datetime(_first(params, "dateStart")),
                end=_parse_datetime(_first(params, "dateEnd")),
            ),
        )

    @staticmethod
    def create_empty_filter() -> UserFilter:
        return UserFilter()

    @staticmethod
    def is_empty_filter(filters: UserFilter) -> bool:
        return (
            not filters.origins
            and filters.language is None
            and filters.word_length_min is None
            and filters.word_length_max is None
            and filters.has_audio is None
            and filters.has_attributes is None
            and not filters.date_range.is_set
        )

    @staticmethod
    def merge_filters(
        base: UserFilter, updates: Union[UserFilter, Mapping[str, Any]]
    ) -> UserFilter:
        """Return a new filter where every non-None update replaces the base value."""
        if isinstance(updates, UserFilter):
            updates = updates.model_dump(exclude_unset=True)
        changes = {
            key: value
            for key, value in updates.items()
            if key in UserFilter.model_fields and value is not None
        }
        return UserFilter.model_validate({**base.model_dump(), **changes})
