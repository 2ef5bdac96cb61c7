"""Script detection, word segmentation and highlight segments.

Handles Devanagari, Telugu and Latin (including romanized Sanskrit with
diacritics such as IAST) without splitting Indic conjuncts or vowel signs
out of the word they belong to. Highlighting produces plain data segments;
rendering them is left to the caller.

Segmentation is regex over Unicode blocks; no locale-aware word segmenter
(ICU or similar) is used.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import List


class Script(str, Enum):
    DEVANAGARI = "devanagari"
    TELUGU = "telugu"
    LATIN = "latin"
    MIXED = "mixed"
    UNKNOWN = "unknown"


DEVANAGARI_CHARS = "\u0900-\u097F"
TELUGU_CHARS = "\u0C00-\u0C7F"
# Basic Latin letters, Latin-1/Extended-A/B letters, Latin Extended Additional
# (IAST dots and macrons) and combining diacritical marks.
LATIN_CHARS = "A-Za-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u024F\u1E00-\u1EFF\u0300-\u036F"

DEVANAGARI_RE = re.compile(f"[{DEVANAGARI_CHARS}]")
TELUGU_RE = re.compile(f"[{TELUGU_CHARS}]")
LATIN_RE = re.compile(f"[{LATIN_CHARS}]")

DEVANAGARI_WORD = f"[{DEVANAGARI_CHARS}]+"
TELUGU_WORD = f"[{TELUGU_CHARS}]+"
LATIN_WORD = f"[{LATIN_CHARS}]+(?:['-][{LATIN_CHARS}]+)*"

WORD_PATTERNS = {
    Script.DEVANAGARI: re.compile(DEVANAGARI_WORD),
    Script.TELUGU: re.compile(TELUGU_WORD),
    Script.LATIN: re.compile(LATIN_WORD),
}
ANY_WORD_PATTERN = re.compile(f"{DEVANAGARI_WORD}|{TELUGU_WORD}|{LATIN_WORD}")

COMBINING_MARKS_RE = re.compile("[\u0300-\u036F]")


def detect_script(text: str) -> Script:
    """Classify text by the Unicode blocks it uses.

    Returns MIXED when more than one supported block is present and UNKNOWN
    for empty text or text with no letters from a supported block.
    """
    if not text or not text.strip():
        return Script.UNKNOWN

    found = [
        script
        for script, pattern in (
            (Script.DEVANAGARI, DEVANAGARI_RE),
            (Script.TELUGU, TELUGU_RE),
            (Script.LATIN, LATIN_RE),
        )
        if pattern.search(text)
    ]

    if len(found) > 1:
        return Script.MIXED
    if found:
        return found[0]
    return Script.UNKNOWN


@dataclass(frozen=True)
class WordBoundary:
    text: str
    start: int
    end: int
    script: Script


def get_word_boundaries(text: str) -> List[WordBoundary]:
    """Split text into word spans, each tagged with its own script."""
    if not text:
        return []

    pattern = WORD_PATTERNS.get(detect_script(text), ANY_WORD_PATTERN)
    return [
        WordBoundary(
            text=match.group(0),
            start=match.start(),
            end=match.end(),
            script=detect_script(match.group(0)),
        )
        for match in pattern.finditer(text)
    ]


class HighlightMatchType(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    CONTAINS = "contains"
    NONE = "none"


@dataclass(frozen=True)
class HighlightSegment:
    text: str
    highlighted: bool
    match_type: HighlightMatchType
    start: int
    end: int


def _plain_segment(text: str, start: int, end: int) -> HighlightSegment:
    return HighlightSegment(
        text=text,
        highlighted=False,
        match_type=HighlightMatchType.NONE,
        start=start,
        end=end,
    )


def highlight_text(
    text: str, search_term: str, case_sensitive: bool = False
) -> List[HighlightSegment]:
    """Mark the words of text that match search_term.

    Joining the ``text`` of the returned segments reproduces the input
    exactly; gaps between words come back as unhighlighted segments.
    """
    if not text or not search_term:
        return [_plain_segment(text or "", 0, len(text or ""))]

    term = search_term if case_sensitive else search_term.lower()
    segments: List[HighlightSegment] = []
    last_end = 0

    for boundary in get_word_boundaries(text):
        if boundary.start > last_end:
            segments.append(_plain_segment(text[last_end : boundary.start], last_end, boundary.start))

        word = boundary.text if case_sensitive else boundary.text.lower()
        if word == term:
            match_type = HighlightMatchType.EXACT
        elif word.startswith(term):
            match_type = HighlightMatchType.PREFIX
        elif term in word:
            match_type = HighlightMatchType.CONTAINS
        else:
            match_type = HighlightMatchType.NONE

        segments.append(
            HighlightSegment(
                text=boundary.text,
                highlighted=match_type is not HighlightMatchType.NONE,
                match_type=match_type,
                start=boundary.start,
                end=boundary.end,
            )
        )
        last_end = boundary.end

    if last_end < len(text):
        segments.append(_plain_segment(text[last_end:], last_end, len(text)))

    return segments


def normalize_for_comparison(text: str) -> str:
    """Strip combining diacritics after NFD decomposition and lowercase."""
    if not text:
        return ""
    return COMBINING_MARKS_RE.sub("", unicodedata.normalize("NFD", text)).lower()


def is_diacritic_match(first: str, second: str) -> bool:
    return normalize_for_comparison(first) == normalize_for_comparison(second)


def get_match_snippet(text: str, search_term: str, context_length: int = 50) -> str:
    """Return the text around the first match, with ellipses where it was cut."""
    if not text or not search_term:
        return text

    match_index = text.lower().find(search_term.lower())
    if match_index == -1:
        return text[: context_length * 2]

    start = max(0, match_index - context_length)
    end = min(len(text), match_index + len(search_term) + context_length)

    snippet = text[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet
