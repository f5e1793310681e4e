"""SQLAlchemy implementation of the data gateway (local development, tests)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tuvung.models.course_model import Course, Lecture
from tuvung.models.note_model import Note
from tuvung.models.word_model import Word, WordMeaning

from .base import DataGateway
from .records import (
    CourseRecord,
    LectureRecord,
    MeaningInput,
    MeaningRecord,
    WordDraft,
    WordRecord,
)
from .result import Err, GatewayResult, Ok

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlGateway(DataGateway):
    def __init__(self, db: Session):
        self.db = db

    def _run(self, operation: str, fn: Callable[[], T]) -> GatewayResult[T]:
        try:
            return Ok(fn())
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Gateway operation '%s' failed: %s", operation, exc)
            return Err(str(exc), code=type(exc).__name__)

    @contextmanager
    def detached(self) -> Iterator["SqlGateway"]:
        # The request session is closed once the response is sent.
        with Session(bind=self.db.get_bind()) as db:
            yield SqlGateway(db)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def fetch_courses(self) -> GatewayResult[List[CourseRecord]]:
        def _query() -> List[CourseRecord]:
            rows = self.db.query(Course).order_by(Course.name).all()
            return [CourseRecord.model_validate(row) for row in rows]

        return self._run("fetch_courses", _query)

    def fetch_course(self, course_id: str) -> GatewayResult[Optional[CourseRecord]]:
        def _query() -> Optional[CourseRecord]:
            row = self.db.get(Course, course_id)
            return CourseRecord.model_validate(row) if row else None

        return self._run("fetch_course", _query)

    def fetch_lectures(self, course_id: str) -> GatewayResult[List[LectureRecord]]:
        def _query() -> List[LectureRecord]:
            rows = (
                self.db.query(Lecture)
                .filter(Lecture.course_id == course_id)
                .order_by(Lecture.title)
                .all()
            )
            return [LectureRecord.model_validate(row) for row in rows]

        return self._run("fetch_lectures", _query)

    def fetch_lecture(self, lecture_id: str) -> GatewayResult[Optional[LectureRecord]]:
        def _query() -> Optional[LectureRecord]:
            row = self.db.get(Lecture, lecture_id)
            return LectureRecord.model_validate(row) if row else None

        return self._run("fetch_lecture", _query)

    def fetch_lecture_counts(self) -> GatewayResult[Dict[str, int]]:
        def _query() -> Dict[str, int]:
            rows = (
                self.db.query(Lecture.course_id, func.count(Lecture.lecture_id))
                .group_by(Lecture.course_id)
                .all()
            )
            return {course_id: int(count) for course_id, count in rows}

        return self._run("fetch_lecture_counts", _query)

    # ------------------------------------------------------------------
    # Words and meanings
    # ------------------------------------------------------------------
    def fetch_words(self, lecture_id: str) -> GatewayResult[List[WordRecord]]:
        return self.fetch_words_for_lectures([lecture_id])

    def fetch_words_for_lectures(self, lecture_ids: Sequence[str]) -> GatewayResult[List[WordRecord]]:
        ids = list(lecture_ids)
        if not ids:
            return Ok([])

        def _query() -> List[WordRecord]:
            rows = (
                self.db.query(Word)
                .filter(Word.lecture_id.in_(ids))
                .order_by(Word.order_in_lecture.asc())
                .all()
            )
            return [WordRecord.model_validate(row) for row in rows]

        return self._run("fetch_words", _query)

    def fetch_word(self, word_id: str) -> GatewayResult[Optional[WordRecord]]:
        def _query() -> Optional[WordRecord]:
            row = self.db.get(Word, word_id)
            return WordRecord.model_validate(row) if row else None

        return self._run("fetch_word", _query)

    def fetch_meanings(self, word_ids: Iterable[str]) -> GatewayResult[Dict[str, List[MeaningRecord]]]:
        ids = list(dict.fromkeys(word_ids))
        if not ids:
            return Ok({})

        def _query() -> Dict[str, List[MeaningRecord]]:
            rows = (
                self.db.query(WordMeaning)
                .filter(WordMeaning.word_id.in_(ids))
                .order_by(WordMeaning.meaning_added_at.asc())
                .all()
            )
            grouped: Dict[str, List[MeaningRecord]] = {}
            for row in rows:
                grouped.setdefault(row.word_id, []).append(MeaningRecord.model_validate(row))
            return grouped

        return self._run("fetch_meanings", _query)

    def next_order(self, lecture_id: str) -> GatewayResult[int]:
        def _query() -> int:
            current = self.db.execute(
                select(func.max(Word.order_in_lecture)).where(Word.lecture_id == lecture_id)
            ).scalar()
            return 0 if current is None else int(current) + 1

        return self._run("next_order", _query)

    def insert_word(self, lecture_id: str, draft: WordDraft) -> GatewayResult[WordRecord]:
        def _insert() -> WordRecord:
            word = Word(lecture_id=lecture_id, **draft.model_dump())
            self.db.add(word)
            self.db.commit()
            self.db.refresh(word)
            return WordRecord.model_validate(word)

        return self._run("insert_word", _insert)

    def update_word(self, word_id: str, draft: WordDraft) -> GatewayResult[WordRecord]:
        def _update() -> Optional[WordRecord]:
            word = self.db.get(Word, word_id)
            if word is None:
                return None
            for field, value in draft.model_dump().items():
                setattr(word, field, value)
            self.db.commit()
            self.db.refresh(word)
            return WordRecord.model_validate(word)

        result = self._run("update_word", _update)
        if isinstance(result, Ok) and result.value is None:
            return Err("Word not found", code="not_found")
        return result

    def replace_meanings(
        self, word_id: str, meanings: Sequence[MeaningInput]
    ) -> GatewayResult[List[MeaningRecord]]:
        def _replace() -> List[MeaningRecord]:
            self.db.query(WordMeaning).filter(WordMeaning.word_id == word_id).delete(
                synchronize_session=False
            )
            # Distinct timestamps keep the insertion order stable.
            base = datetime.now(timezone.utc)
            created: List[WordMeaning] = []
            for offset, item in enumerate(meanings):
                row = WordMeaning(
                    word_id=word_id,
                    meaning=item.meaning,
                    part_of_speech=item.part_of_speech,
                    meaning_added_at=base + timedelta(microseconds=offset),
                )
                self.db.add(row)
                created.append(row)
            self.db.commit()
            return [MeaningRecord.model_validate(row) for row in created]

        return self._run("replace_meanings", _replace)

    def delete_word(self, word_id: str) -> GatewayResult[None]:
        def _delete() -> bool:
            word = self.db.get(Word, word_id)
            if word is None:
                return False
            self.db.delete(word)
            self.db.commit()
            return True

        result = self._run("delete_word", _delete)
        if isinstance(result, Err):
            return result
        if not result.value:
            return Err("Word not found", code="not_found")
        return Ok(None)

    def persist_order(self, lecture_id: str, ordered_word_ids: Sequence[str]) -> GatewayResult[None]:
        ids = list(ordered_word_ids)

        def _persist() -> List[str]:
            rows = {
                row.word_id: row
                for row in self.db.query(Word).filter(Word.lecture_id == lecture_id).all()
            }
            unknown = [word_id for word_id in ids if word_id not in rows]
            if unknown:
                return unknown
            for index, word_id in enumerate(ids):
                rows[word_id].order_in_lecture = index
            self.db.commit()
            return []

        result = self._run("persist_order", _persist)
        if isinstance(result, Err):
            return result
        if result.value:
            return Err(f"Words not in lecture: {', '.join(result.value)}", code="unknown_word")
        return Ok(None)

    # ------------------------------------------------------------------
    # Learner notes
    # ------------------------------------------------------------------
    def record_miss(self, user_id: str, word_id: str, note_text: str) -> GatewayResult[None]:
        def _insert() -> None:
            self.db.add(Note(user_id=user_id, word_id=word_id, note_text=note_text))
            self.db.commit()

        return self._run("record_miss", _insert)

    def fetch_miss_counts(self, user_id: str, word_ids: Iterable[str]) -> GatewayResult[Dict[str, int]]:
        ids = list(dict.fromkeys(word_ids))
        if not ids:
            return Ok({})

        def _query() -> Dict[str, int]:
            rows = (
                self.db.query(Note.word_id, func.count(Note.note_id))
                .filter(Note.user_id == user_id, Note.word_id.in_(ids))
                .group_by(Note.word_id)
                .all()
            )
            return {word_id: int(count) for word_id, count in rows}

        return self._run("fetch_miss_counts", _query)
