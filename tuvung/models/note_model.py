from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tuvung.db.base_class import Base


class Note(Base):
    """A learner's note on a word; practice misses are stored here too."""

    __tablename__ = "note"

    note_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    word_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("words.word_id", ondelete="CASCADE"), index=True, nullable=False
    )
    note_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
