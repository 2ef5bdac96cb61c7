"""Explainable relevance scoring for dictionary matches.

Scores fall in the 0-100 range and come with a per-component breakdown so
ranking decisions can be inspected and tuned.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence, TypeVar

from lexicon_search.text.highlight import Script, detect_script, normalize_for_comparison

DEFAULT_TEXT_SCORE = 20
MAX_TEXT_SCORE = 40
EXACT_MATCH_BONUS = 50
PREFIX_MATCH_BONUS = 30
DEFAULT_MIN_RELEVANCE = 30


@dataclass
class SearchMatchContext:
    search_term: str
    word: str
    description: Optional[str] = None
    phonetic: Optional[str] = None
    word_index: Optional[int] = None
    total_words: Optional[int] = None
    backend_score: Optional[float] = None


@dataclass
class RelevanceScoreBreakdown:
    total_score: float = 0
    text_score: float = 0
    exact_match_bonus: int = 0
    prefix_match_bonus: int = 0
    position_bonus: int = 0
    length_penalty: int = 0
    script_bonus: int = 0


class RelevanceCategory(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def calculate_relevance_score(context: SearchMatchContext) -> RelevanceScoreBreakdown:
    """Score one entry against a search term.

    The text component comes from the backend's full-text metric when one is
    available (scaled by 20, capped at 40) and is a flat 20 otherwise.
    Exact and prefix bonuses compare diacritic-normalized forms of the word
    and its phonetic rendering.
    """
    breakdown = RelevanceScoreBreakdown()

    normalized_search = normalize_for_comparison(context.search_term)
    normalized_word = normalize_for_comparison(context.word)
    normalized_phonetic = normalize_for_comparison(context.phonetic) if context.phonetic else ""

    if context.backend_score is not None and context.backend_score > 0:
        breakdown.text_score = min(MAX_TEXT_SCORE, context.backend_score * 20)
    else:
        breakdown.text_score = DEFAULT_TEXT_SCORE

    if normalized_search in (normalized_word, normalized_phonetic):
        breakdown.exact_match_bonus = EXACT_MATCH_BONUS
    elif normalized_word.startswith(normalized_search) or normalized_phonetic.startswith(
        normalized_search
    ):
        breakdown.prefix_match_bonus = PREFIX_MATCH_BONUS

    if context.word_index is not None and context.total_words:
        position = context.word_index / context.total_words
        if position < 0.1:
            breakdown.position_bonus = 10
        elif position < 0.3:
            breakdown.position_bonus = 5

    word_length = len(context.word)
    if word_length > len(context.search_term) * 3 and word_length > 20:
        breakdown.length_penalty = -5

    search_script = detect_script(context.search_term)
    if search_script not in (Script.UNKNOWN, Script.MIXED) and search_script == detect_script(
        context.word
    ):
        breakdown.script_bonus = 5

    breakdown.total_score = max(
        0,
        min(
            100,
            breakdown.text_score
            + breakdown.exact_match_bonus
            + breakdown.prefix_match_bonus
            + breakdown.position_bonus
            + breakdown.length_penalty
            + breakdown.script_bonus,
        ),
    )
    return breakdown


def get_relevance_category(score: float) -> RelevanceCategory:
    if score >= 90:
        return RelevanceCategory.EXCELLENT
    if score >= 70:
        return RelevanceCategory.GOOD
    if score >= 50:
        return RelevanceCategory.FAIR
    return RelevanceCategory.POOR


RELEVANCE_LABELS = {
    RelevanceCategory.EXCELLENT: "Highly relevant",
    RelevanceCategory.GOOD: "Relevant",
    RelevanceCategory.FAIR: "Somewhat relevant",
    RelevanceCategory.POOR: "Less relevant",
}


def get_relevance_label(score: float) -> str:
    return RELEVANCE_LABELS[get_relevance_category(score)]


class Scored(Protocol):
    relevance_score: float


S = TypeVar("S", bound=Scored)


def sort_by_relevance(results: Sequence[S]) -> List[S]:
    """Return a new list ordered by relevance_score, highest first; ties keep input order."""
    return sorted(results, key=lambda result: result.relevance_score, reverse=True)


def filter_by_relevance(results: Sequence[S], min_score: float = DEFAULT_MIN_RELEVANCE) -> List[S]:
    return [result for result in results if result.relevance_score >= min_score]


def apply_boost(score: float, boost_factor: float) -> float:
    """Multiply a score by a preference factor, capped at 100."""
    return min(100, score * boost_factor)


def calculate_batch_relevance(
    contexts: Sequence[SearchMatchContext], search_term: str
) -> List[RelevanceScoreBreakdown]:
    """Score a batch of candidates against one term.

    The batch size stands in for total_words, and a missing word_index
    defaults to the candidate's position in the batch.
    """
    total_words = len(contexts)
    breakdowns = []
    for index, context in enumerate(contexts):
        breakdowns.append(
            calculate_relevance_score(
                SearchMatchContext(
                    search_term=search_term,
                    word=context.word,
                    description=context.description,
                    phonetic=context.phonetic,
                    word_index=context.word_index if context.word_index is not None else index,
                    total_words=total_words,
                    backend_score=context.backend_score,
                )
            )
        )
    return breakdowns
