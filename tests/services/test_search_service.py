"""Tests for SearchService orchestration and inline relevance scoring."""

from datetime import datetime, timezone
from typing import List, Optional, get_args, get_origin, get_type_hints

import pytest

from lexicon_search.repository import DatabaseResult, DictionaryRepository, RepositoryQuery
from lexicon_search.schemas import (
    DictionaryEntry,
    MatchType,
    Pagination,
    SearchOptions,
    SearchResult,
    ServiceError,
    ServiceResponse,
    ServiceSuccess,
    SortBy,
    SortDirection,
    UserFilter,
)
from lexicon_search.services import SearchService
from lexicon_search.services import search_service as search_service_module

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_entry(
    entry_id: str,
    words: List[tuple[str, str]],
    phonetic: str = "",
    descriptions: Optional[List[str]] = None,
    word_index: int = 1,
) -> DictionaryEntry:
    return DictionaryEntry(
        id=entry_id,
        origin="mw",
        word_index=word_index,
        word=[{"language": language, "value": value} for language, value in words],
        description=[{"language": "en", "value": d} for d in descriptions or []],
        phonetic=phonetic,
        created_at=NOW,
        updated_at=NOW,
    )


NAMASTE = make_entry(
    "mw-1",
    [("sa", "नमस्ते"), ("iast", "namaste")],
    phonetic="namaste",
    descriptions=["salutation to you"],
)


class FakeRepository(DictionaryRepository):
    """Records calls and returns a canned page."""

    def __init__(
        self,
        data=None,
        total=None,
        has_more=False,
        error: Exception | None = None,
        scores: dict[str, float] | None = None,
    ):
        super().__init__(session_maker=None)
        self.data = data or []
        self.scores = scores or {}
        self.total = len(self.data) if total is None else total
        self.has_more = has_more
        self.error = error
        self.calls: list[tuple[str, RepositoryQuery]] = []

    def _result(self, method: str, query: RepositoryQuery) -> DatabaseResult:
        self.calls.append((method, query))
        if self.error:
            raise self.error
        return DatabaseResult(
            data=list(self.data), total=self.total, has_more=self.has_more, scores=self.scores
        )

    async def find_words(self, query):
        return self._result("find_words", query)

    async def count_words(self, query):
        self.calls.append(("count_words", query))
        return self.total

    async def aggregate_search(self, query):
        return self._result("aggregate_search", query)

    async def find_by_id(self, entry_id):
        return next((entry for entry in self.data if entry.id == entry_id), None)


@pytest.fixture
def service_factory(app_config):
    def _make(repository: FakeRepository) -> SearchService:
        return SearchService(repository, app_config=app_config)

    return _make


@pytest.mark.asyncio
async def test_short_query_uses_pattern_path(service_factory):
    repository = FakeRepository()
    await service_factory(repository).perform_search(SearchOptions(query_text="a"))

    assert [method for method, _ in repository.calls] == ["find_words"]


@pytest.mark.asyncio
async def test_empty_query_uses_pattern_path(service_factory):
    repository = FakeRepository()
    await service_factory(repository).perform_search(SearchOptions(query_text="   "))

    method, query = repository.calls[0]
    assert method == "find_words"
    assert query.query_text == ""


@pytest.mark.asyncio
async def test_trimmed_query_uses_full_text_path(service_factory):
    repository = FakeRepository()
    await service_factory(repository).perform_search(SearchOptions(query_text="  ab  "))

    method, query = repository.calls[0]
    assert method == "aggregate_search"
    assert query.query_text == "ab"


@pytest.mark.asyncio
async def test_full_text_threshold_comes_from_config(app_config):
    repository = FakeRepository()
    service = SearchService(
        repository, app_config=app_config.model_copy(update={"full_text_min_query_length": 4})
    )
    await service.perform_search(SearchOptions(query_text="abc"))
    await service.perform_search(SearchOptions(query_text="abcd"))

    assert [method for method, _ in repository.calls] == ["find_words", "aggregate_search"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "sort_by,expected",
    [
        (SortBy.ALPHABETICAL, "phonetic"),
        (SortBy.RELEVANCE, "relevance"),
        (SortBy.WORD_LENGTH, "word_length"),
    ],
)
async def test_sort_mapping(service_factory, sort_by, expected):
    repository = FakeRepository()
    await service_factory(repository).perform_search(
        SearchOptions(query_text="rama", sort_by=sort_by, sort_direction=SortDirection.ASC)
    )

    _, query = repository.calls[0]
    assert query.sort_by == expected
    assert query.sort_order == "asc"


@pytest.mark.asyncio
async def test_filters_and_pagination_reach_repository(service_factory):
    repository = FakeRepository()
    await service_factory(repository).perform_search(
        SearchOptions(
            query_text="rama",
            filters=UserFilter(origins=["mw", "ap90"], word_length_min=3, has_audio=True),
            pagination=Pagination(limit=5, offset=10),
        )
    )

    _, query = repository.calls[0]
    assert query.origins == ["mw", "ap90"]
    assert query.word_length_min == 3
    assert query.word_length_max is None
    assert query.has_audio is True
    assert query.has_attributes is None
    assert query.date_range is None
    assert (query.limit, query.offset) == (5, 10)


@pytest.mark.asyncio
async def test_page_size_is_clamped_to_max(service_factory, app_config):
    repository = FakeRepository(has_more=True, total=1000)
    response = await service_factory(repository).perform_search(
        SearchOptions(query_text="rama", pagination=Pagination(limit=5000, offset=0))
    )

    _, query = repository.calls[0]
    assert query.limit == app_config.max_page_size
    assert response.data.next_offset == app_config.max_page_size


@pytest.mark.asyncio
async def test_success_response_shape(service_factory):
    repository = FakeRepository(data=[NAMASTE], total=1)
    response = await service_factory(repository).perform_search(
        SearchOptions(query_text="namaste")
    )

    assert isinstance(response, ServiceSuccess)
    assert response.status == "success"
    assert response.data.total == 1
    assert response.data.has_more is False
    assert response.data.next_offset is None
    item = response.data.results[0]
    assert item.id == "mw-1"
    assert item.match_type == MatchType.EXACT
    assert item.relevance_score >= 75


def test_perform_search_return_annotation_resolves():
    hints = get_type_hints(SearchService.perform_search)

    assert set(get_args(hints["return"])) == {ServiceSuccess[SearchResult], ServiceError}


def test_service_response_alias_is_generic():
    alias = ServiceResponse[SearchResult]
    assert get_origin(alias) is ServiceResponse


@pytest.mark.asyncio
async def test_backend_score_is_reported_in_metadata(service_factory):
    repository = FakeRepository(data=[NAMASTE], scores={"mw-1": 3.25})
    response = await service_factory(repository).perform_search(
        SearchOptions(query_text="namaste")
    )
    without_scores = await service_factory(FakeRepository(data=[NAMASTE])).perform_search(
        SearchOptions(query_text="namaste")
    )

    item = response.data.results[0]
    assert item.search_metadata.backend_score == 3.25
    assert without_scores.data.results[0].search_metadata.backend_score is None
    assert item.relevance_score == without_scores.data.results[0].relevance_score


@pytest.mark.asyncio
async def test_next_offset_when_more_results(service_factory):
    repository = FakeRepository(data=[NAMASTE], total=30, has_more=True)
    response = await service_factory(repository).perform_search(
        SearchOptions(query_text="namaste", pagination=Pagination(limit=10, offset=20))
    )

    assert response.data.has_more is True
    assert response.data.next_offset == 30


@pytest.mark.asyncio
async def test_repository_error_becomes_service_error(service_factory):
    repository = FakeRepository(error=RuntimeError("database is locked"))
    response = await service_factory(repository).perform_search(SearchOptions(query_text="rama"))

    assert isinstance(response, ServiceError)
    assert response.status == "error"
    assert response.error == "Search failed"
    assert response.details == "database is locked"


@pytest.mark.asyncio
async def test_relevance_sort_reorders_descending_and_is_stable(service_factory):
    weak_first = make_entry("weak-1", [("iast", "xyz")], phonetic="xyz", descriptions=["rama"])
    strong = make_entry("strong", [("iast", "rama")], phonetic="rama", word_index=2)
    weak_second = make_entry("weak-2", [("iast", "abc")], phonetic="abc", descriptions=["rama"])
    repository = FakeRepository(data=[weak_first, strong, weak_second])

    response = await service_factory(repository).perform_search(
        SearchOptions(query_text="rama", sort_by=SortBy.RELEVANCE)
    )

    results = response.data.results
    assert [item.id for item in results] == ["strong", "weak-1", "weak-2"]
    scores = [item.relevance_score for item in results]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_field_sort_keeps_repository_order(service_factory):
    weak = make_entry("weak", [("iast", "xyz")], phonetic="xyz", descriptions=["rama"])
    strong = make_entry("strong", [("iast", "rama")], phonetic="rama")
    repository = FakeRepository(data=[weak, strong])

    response = await service_factory(repository).perform_search(
        SearchOptions(query_text="rama", sort_by=SortBy.ALPHABETICAL)
    )

    assert [item.id for item in response.data.results] == ["weak", "strong"]


@pytest.mark.asyncio
async def test_highlight_segments_attached_on_request(service_factory):
    repository = FakeRepository(data=[NAMASTE])

    plain = await service_factory(repository).perform_search(SearchOptions(query_text="namaste"))
    highlighted = await service_factory(repository).perform_search(
        SearchOptions(query_text="salut", highlight=True)
    )

    assert plain.data.results[0].highlighted_word is None
    item = highlighted.data.results[0]
    assert "".join(segment.text for segment in item.highlighted_word) == "नमस्ते"
    assert "".join(segment.text for segment in item.highlighted_description) == "salutation to you"
    assert [s.text for s in item.highlighted_description if s.highlighted] == ["salutation"]


class TestCalculateRelevance:
    @pytest.fixture
    def service(self, app_config):
        return SearchService(FakeRepository(), app_config=app_config)

    def test_exact_match_with_native_and_roman_renderings(self, service):
        item = service.calculate_relevance(NAMASTE, "namaste", ["namaste", "नमस्ते"])

        breakdown = item.search_metadata.score_breakdown
        # नमस्ते +5, namaste +15, phonetic +15
        assert breakdown.text_score == 35
        assert breakdown.prefix_bonus == 30
        assert breakdown.exact_bonus == 30
        assert item.relevance_score == 95
        assert item.match_type == MatchType.EXACT

    def test_query_is_trimmed_and_lowercased(self, service):
        item = service.calculate_relevance(NAMASTE, "  NAMASTE ", ["NAMASTE"])
        assert item.match_type == MatchType.EXACT
        assert item.search_metadata.score_breakdown.exact_bonus == 30

    def test_prefix_match(self, service):
        item = service.calculate_relevance(NAMASTE, "nam", ["nam"])

        assert item.match_type == MatchType.PREFIX
        assert item.search_metadata.score_breakdown.prefix_bonus == 30
        assert item.search_metadata.score_breakdown.exact_bonus == 0
        assert item.relevance_score == 60

    def test_phonetic_only_exact_and_prefix_use_lower_bonus(self, service):
        entry = make_entry("mw-9", [("sa", "नमस्ते")], phonetic="namaste")
        item = service.calculate_relevance(entry, "namaste", ["namaste"])

        breakdown = item.search_metadata.score_breakdown
        assert breakdown.prefix_bonus == 25
        assert breakdown.exact_bonus == 25
        assert breakdown.text_score == 15
        assert item.relevance_score == 65
        assert item.match_type == MatchType.EXACT

    def test_phonetic_substring_match_type(self, service):
        entry = make_entry("mw-9", [("sa", "नमस्ते")], phonetic="namaste")
        item = service.calculate_relevance(entry, "maste", ["maste"])

        assert item.match_type == MatchType.PHONETIC
        assert item.relevance_score == 15

    def test_fuzzy_when_only_gloss_matches(self, service):
        entry = make_entry("mw-3", [("iast", "kamala")], phonetic="kamala", descriptions=["lotus"])
        item = service.calculate_relevance(entry, "lotus", ["lotus"])

        assert item.match_type == MatchType.FUZZY
        assert item.relevance_score == 15

    def test_text_score_is_capped(self, service):
        entry = make_entry(
            "mw-5",
            [("iast", "rama"), ("hk", "rAma"), ("itrans", "rAma")],
            phonetic="rama",
            descriptions=["rama one", "rama two", "rama three"],
        )
        item = service.calculate_relevance(entry, "rama", ["rama"])

        assert item.search_metadata.score_breakdown.text_score == 40
        assert item.relevance_score == 100

    def test_empty_query_scores_zero(self, service):
        item = service.calculate_relevance(NAMASTE, "   ", [])

        assert item.relevance_score == 0
        assert item.match_type == MatchType.FUZZY

    def test_exact_never_scores_below_prefix(self, service):
        exact = service.calculate_relevance(NAMASTE, "namaste", ["namaste"])
        prefix = service.calculate_relevance(NAMASTE, "namas", ["namas"])

        assert exact.relevance_score >= prefix.relevance_score

    def test_metadata_languages(self, service):
        latin = service.calculate_relevance(NAMASTE, "namaste", [])
        devanagari = service.calculate_relevance(NAMASTE, "नमस्ते", [])
        no_words = service.calculate_relevance(
            make_entry("empty", [], phonetic="x"), "namaste", []
        )

        assert latin.search_metadata.query_language == "latin"
        assert devanagari.search_metadata.query_language == "devanagari"
        assert latin.search_metadata.matched_language == "sa"
        assert no_words.search_metadata.matched_language == "unknown"

    def test_result_keeps_entry_fields(self, service):
        item = service.calculate_relevance(NAMASTE, "namaste", [])

        assert item.id == NAMASTE.id
        assert item.word == NAMASTE.word
        assert item.phonetic == NAMASTE.phonetic
        assert 0 <= item.relevance_score <= 100


class TestNormalizeScripts:
    @pytest.fixture
    def service(self, app_config):
        return SearchService(FakeRepository(), app_config=app_config)

    def test_blank_query(self, service):
        assert service.normalize_scripts("") == []
        assert service.normalize_scripts("   ") == []

    def test_roman_query_gains_devanagari_variant(self, service):
        variants = service.normalize_scripts("namaste")

        assert variants[0] == "namaste"
        assert "नमस्ते" in variants
        assert len(variants) == len(set(variants))

    def test_devanagari_query_gains_iast_variant(self, service):
        variants = service.normalize_scripts("राम")

        assert variants[0] == "राम"
        assert "rāma" in variants
        assert len(variants) == len(set(variants))

    def test_failing_scheme_is_skipped(self, service, monkeypatch):
        real_transliterate = search_service_module.sanscript.transliterate

        def flaky(text, source, target):
            if target == "telugu":
                raise ValueError("no telugu today")
            return real_transliterate(text, source, target)

        monkeypatch.setattr(search_service_module.sanscript, "transliterate", flaky)
        variants = service.normalize_scripts("namaste")

        assert variants[0] == "namaste"
        assert "नमस्ते" in variants
        assert not any("\u0c00" <= ch <= "\u0c7f" for variant in variants for ch in variant)

    def test_all_schemes_failing_keeps_original(self, service, monkeypatch):
        def broken(text, source, target):
            raise RuntimeError("broken")

        monkeypatch.setattr(search_service_module.sanscript, "transliterate", broken)
        assert service.normalize_scripts("namaste") == ["namaste"]
