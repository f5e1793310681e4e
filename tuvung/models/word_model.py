# Fichier: tuvung/models/word_model.py
import uuid
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tuvung.db.base_class import Base

if TYPE_CHECKING:
    from .course_model import Lecture


def _uuid() -> str:
    return str(uuid.uuid4())


class Word(Base):
    __tablename__ = "words"

    word_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    lecture_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("lectures.lecture_id", ondelete="CASCADE"), index=True, nullable=False
    )
    text: Mapped[str] = mapped_column(String(255), nullable=False)
    ipa: Mapped[Optional[str]] = mapped_column(String(255))
    # Either a storage path inside the bucket or an absolute http(s) URL.
    audio_url: Mapped[Optional[str]] = mapped_column(String(1024))
    image_url: Mapped[Optional[str]] = mapped_column(String(1024))
    order_in_lecture: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    # --- Relations ---
    lecture: Mapped["Lecture"] = relationship(back_populates="words")
    meanings: Mapped[List["WordMeaning"]] = relationship(
        back_populates="word",
        cascade="all, delete-orphan",
        order_by="WordMeaning.meaning_added_at",
    )


class WordMeaning(Base):
    __tablename__ = "wordmeanings"

    meaning_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    word_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("words.word_id", ondelete="CASCADE"), index=True, nullable=False
    )
    meaning: Mapped[str] = mapped_column(Text, nullable=False)
    part_of_speech: Mapped[Optional[str]] = mapped_column(String(50))
    example_sentence: Mapped[Optional[str]] = mapped_column(Text)
    meaning_added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # --- Relations ---
    word: Mapped["Word"] = relationship(back_populates="meanings")
