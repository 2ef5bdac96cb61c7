"""lexicon-search - multi-script dictionary search and relevance ranking."""

__version__ = "0.1.0"
