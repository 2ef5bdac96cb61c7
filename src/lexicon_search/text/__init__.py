"""Script-aware text helpers: detection, segmentation and highlighting."""

from lexicon_search.text.highlight import (
    HighlightMatchType,
    HighlightSegment,
    Script,
    WordBoundary,
    detect_script,
    get_match_snippet,
    get_word_boundaries,
    highlight_text,
    is_diacritic_match,
    normalize_for_comparison,
)

__all__ = [
    "HighlightMatchType",
    "HighlightSegment",
    "Script",
    "WordBoundary",
    "detect_script",
    "get_match_snippet",
    "get_word_boundaries",
    "highlight_text",
    "is_diacritic_match",
    "normalize_for_comparison",
]
