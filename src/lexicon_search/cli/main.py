"""Main CLI entry point for lexicon-search."""  # pragma: no cover

from lexicon_search.cli.app import app  # pragma: no cover

# Register commands
from lexicon_search.cli.commands import entry, filters, search  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
