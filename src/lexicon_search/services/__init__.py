from lexicon_search.services.filter_service import FilterService, FilterValidationResult
from lexicon_search.services.search_service import SearchService

__all__ = [
    "FilterService",
    "FilterValidationResult",
    "SearchService",
]
