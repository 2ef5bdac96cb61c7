"""CLI tools for lexicon-search."""
