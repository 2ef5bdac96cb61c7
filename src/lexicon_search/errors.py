"""Typed errors raised by lexicon-search entry points."""

from typing import List


class FilterValidationError(ValueError):
    """Raised when user filters fail validation before any backend call."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid filters")


class EntryNotFoundError(LookupError):
    """Raised when a dictionary entry id does not exist."""
