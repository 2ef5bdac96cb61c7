"""Search orchestration: retrieval, scoring and result shaping."""

from typing import List, Optional

from indic_transliteration import detect, sanscript
from loguru import logger

from lexicon_search.config import ConfigManager, LexiconSearchConfig
from lexicon_search.repository.dictionary_repository import (
    DictionaryRepository,
    RepositorySortBy,
)
from lexicon_search.schemas.dictionary import DictionaryEntry
from lexicon_search.schemas.search import (
    MatchType,
    Pagination,
    ScoreBreakdown,
    SearchMetadata,
    SearchOptions,
    SearchResult,
    SearchResultItem,
    ServiceError,
    ServiceSuccess,
    SortBy,
)
from lexicon_search.services.filter_service import FilterService
from lexicon_search.text.highlight import detect_script, highlight_text

SORT_MAPPING: dict[SortBy, RepositorySortBy] = {
    SortBy.ALPHABETICAL: "phonetic",
    SortBy.RELEVANCE: "relevance",
    SortBy.WORD_LENGTH: "word_length",
}

MAX_TEXT_SCORE = 40
QUERY_MATCH_SCORE = 10
VARIANT_MATCH_SCORE = 5
WORD_PREFIX_BONUS = 30
PHONETIC_PREFIX_BONUS = 25
WORD_EXACT_BONUS = 30
PHONETIC_EXACT_BONUS = 25


class SearchService:
    """Runs a search against a DictionaryRepository and scores the results.

    Queries at least full_text_min_query_length characters long (after
    trimming) go to the full-text path; shorter ones use pattern matching.
    """

    def __init__(
        self,
        repository: DictionaryRepository,
        app_config: Optional[LexiconSearchConfig] = None,
    ):
        self.repository = repository
        self.app_config = app_config or ConfigManager().config

    async def perform_search(
        self, options: SearchOptions
    ) -> ServiceSuccess[SearchResult] | ServiceError:
        """Search, score and page. Failures come back as ServiceError, never raised."""
        try:
            query_text = options.query_text.strip()
            variants = self.normalize_scripts(options.query_text)

            pagination = options.pagination
            if pagination.limit > self.app_config.max_page_size:
                logger.debug(
                    f"Clamping page size {pagination.limit} to {self.app_config.max_page_size}"
                )
                pagination = Pagination(
                    limit=self.app_config.max_page_size, offset=pagination.offset
                )

            repository_query = FilterService.build_query(
                options.filters,
                pagination,
                sort_by=SORT_MAPPING.get(options.sort_by, "word_index"),
                sort_order=options.sort_direction.value,
            )
            repository_query.query_text = query_text

            use_full_text = len(query_text) >= self.app_config.full_text_min_query_length
            logger.debug(
                f"Searching {query_text!r} full_text={use_full_text} "
                f"sort={repository_query.sort_by} {repository_query.sort_order} "
                f"limit={pagination.limit} offset={pagination.offset}"
            )
            if use_full_text:
                db_result = await self.repository.aggregate_search(repository_query)
            else:
                db_result = await self.repository.find_words(repository_query)

            results = [
                self.calculate_relevance(
                    entry,
                    options.query_text,
                    variants,
                    backend_score=db_result.scores.get(entry.id),
                )
                for entry in db_result.data
            ]

            if options.sort_by == SortBy.RELEVANCE:
                results = sorted(results, key=lambda item: item.relevance_score, reverse=True)

            if options.highlight and query_text:
                results = [self._with_highlights(item, query_text) for item in results]

            return ServiceSuccess[SearchResult](
                data=SearchResult(
                    results=results,
                    total=db_result.total,
                    has_more=db_result.has_more,
                    next_offset=pagination.offset + pagination.limit
                    if db_result.has_more
                    else None,
                )
            )
        except Exception as e:
            logger.exception(f"Search failed for query {options.query_text!r}: {e}")
            return ServiceError(error="Search failed", details=str(e))

    def calculate_relevance(
        self,
        entry: DictionaryEntry,
        query_text: str,
        variants: List[str],
        backend_score: Optional[float] = None,
    ) -> SearchResultItem:
        """Score an entry against the raw query and its script variants.

        text score: +10 for each searchable string containing the query and
        +5 for each containing any variant, capped at 40. Prefix and exact
        bonuses favour headword renderings (30) over the phonetic form (25).
        The store's full-text rank, when given, is reported in the metadata
        and does not change the score.
        """
        query = query_text.strip().lower()
        word_texts = [w.value.lower() for w in entry.word]
        phonetic = entry.phonetic.lower()
        descriptions = [d.value.lower() for d in entry.description]
        lowered_variants = [variant.lower() for variant in variants if variant]

        text_score = 0
        prefix_bonus = 0
        exact_bonus = 0
        match_type = MatchType.FUZZY

        if query:
            for text in [*word_texts, phonetic, *descriptions]:
                if query in text:
                    text_score += QUERY_MATCH_SCORE
                if any(variant in text for variant in lowered_variants):
                    text_score += VARIANT_MATCH_SCORE
            text_score = min(text_score, MAX_TEXT_SCORE)

            if any(text.startswith(query) for text in word_texts):
                prefix_bonus = WORD_PREFIX_BONUS
            elif phonetic.startswith(query):
                prefix_bonus = PHONETIC_PREFIX_BONUS

            if query in word_texts:
                exact_bonus = WORD_EXACT_BONUS
            elif phonetic == query:
                exact_bonus = PHONETIC_EXACT_BONUS

            if exact_bonus:
                match_type = MatchType.EXACT
            elif prefix_bonus:
                match_type = MatchType.PREFIX
            elif query in phonetic:
                match_type = MatchType.PHONETIC

        return SearchResultItem(
            **entry.model_dump(),
            relevance_score=min(text_score + prefix_bonus + exact_bonus, 100),
            match_type=match_type,
            search_metadata=SearchMetadata(
                query_language=detect_script(query_text).value,
                matched_language=entry.word[0].language if entry.word else "unknown",
                score_breakdown=ScoreBreakdown(
                    text_score=text_score,
                    prefix_bonus=prefix_bonus,
                    exact_bonus=exact_bonus,
                ),
                backend_score=backend_score,
            ),
        )

    def normalize_scripts(self, query: str) -> List[str]:
        """Expand a query into its renderings in the configured schemes.

        The original query always comes first. A scheme that fails to
        transliterate is logged and skipped.
        """
        if not query or not query.strip():
            return []

        source_scheme = detect.detect(query) or sanscript.ITRANS
        if source_scheme not in sanscript.SCHEMES:
            source_scheme = sanscript.ITRANS

        variants = [query]
        for target_scheme in self.app_config.transliteration_schemes:
            if target_scheme == source_scheme:
                continue
            try:
                transliterated = sanscript.transliterate(query, source_scheme, target_scheme)
            except Exception as e:
                logger.warning(
                    f"Transliteration of {query!r} from {source_scheme} to {target_scheme} failed: {e}"
                )
                continue
            if transliterated and transliterated != query:
                variants.append(transliterated)

        return list(dict.fromkeys(variants))

    @staticmethod
    def _with_highlights(item: SearchResultItem, query_text: str) -> SearchResultItem:
        return item.model_copy(
            update={
                "highlighted_word": highlight_text(item.word[0].value, query_text)
                if item.word
                else None,
                "highlighted_description": highlight_text(item.description[0].value, query_text)
                if item.description
                else None,
            }
        )
