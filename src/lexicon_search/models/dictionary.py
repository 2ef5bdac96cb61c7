"""Dictionary word storage model."""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lexicon_search.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DictionaryWord(Base):
    """A lexicon entry as stored in the database.

    word, description and attributes are JSON arrays of objects
    ({language, value} or {key, value}); the FTS index is built from them
    by triggers (see models.search).
    """

    __tablename__ = "dictionary_word"
    __table_args__ = (
        Index("ix_dictionary_word_origin_index", "origin", "word_index"),
        Index("ix_dictionary_word_phonetic", "phonetic"),
        Index("ix_dictionary_word_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    origin: Mapped[str] = mapped_column(String, nullable=False)
    word_index: Mapped[int] = mapped_column(Integer, nullable=False)
    word_lnum: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    word: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    attributes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    phonetic: Mapped[str] = mapped_column(String, nullable=False, default="")
    source_data: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"DictionaryWord(id={self.id!r}, origin={self.origin!r}, phonetic={self.phonetic!r})"
