# Fichier: tuvung/models/course_model.py
import uuid
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tuvung.db.base_class import Base

if TYPE_CHECKING:
    from .word_model import Word


def _uuid() -> str:
    return str(uuid.uuid4())


class Course(Base):
    __tablename__ = "courses"

    course_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    # Supabase auth user id (UUID) of the owner.
    creator_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # --- Relations ---
    lectures: Mapped[List["Lecture"]] = relationship(
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lecture.order_index",
    )


class Lecture(Base):
    __tablename__ = "lectures"

    lecture_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.course_id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    cover_image_url: Mapped[Optional[str]] = mapped_column(String(1024))
    lecture_revised_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # --- Relations ---
    course: Mapped["Course"] = relationship(back_populates="lectures")
    words: Mapped[List["Word"]] = relationship(
        back_populates="lecture",
        cascade="all, delete-orphan",
        order_by="Word.order_in_lecture",
    )
