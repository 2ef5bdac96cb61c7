"""Schemas for dictionary entries as returned by the repository."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LanguageValue(BaseModel):
    """A rendering of a headword or gloss in one language or script."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(..., description="Language or script code, e.g. 'sa', 'IAST'")
    value: str = Field(..., description="Text in that language")


class AttributeValue(BaseModel):
    """A key/value metadata pair attached to an entry (part of speech, gender, ...)."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class DictionaryEntry(BaseModel):
    """A single lexicon entry.

    Entries are created by an external import pipeline; this package only
    reads them.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Entry identifier")
    origin: str = Field(..., description="Source lexicon identifier, e.g. 'mw'")
    word_index: int = Field(..., description="Stable ordinal within the origin lexicon")
    word_lnum: int = Field(default=0, description="Line number in the source lexicon")

    word: List[LanguageValue] = Field(default_factory=list, description="Headword renderings")
    description: List[LanguageValue] = Field(default_factory=list, description="Glosses")
    attributes: List[AttributeValue] = Field(default_factory=list)

    phonetic: str = Field(
        default="", description="Canonical transliteration used for sorting and matching"
    )
    source_data: Optional[Dict[str, Any]] = Field(
        default=None, description="Opaque extra payload, e.g. an audio pointer"
    )

    created_at: datetime
    updated_at: datetime

    @property
    def has_audio(self) -> bool:
        return bool(self.source_data) and self.source_data.get("audio") is not None
