"""CLI commands for lexicon-search."""

from lexicon_search.cli.commands import entry, filters, search

__all__ = ["entry", "filters", "search"]
