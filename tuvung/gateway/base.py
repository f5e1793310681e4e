"""Abstract data access gateway.

All persistence is owned by an external service. Implementations never raise
for transport or database failures; they return :class:`Err` instead and let
the caller decide whether to surface, ignore or degrade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .records import (
    CourseRecord,
    LectureRecord,
    MeaningInput,
    MeaningRecord,
    WordDraft,
    WordRecord,
)
from .result import GatewayResult


class DataGateway(ABC):
    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    @abstractmethod
    def fetch_courses(self) -> GatewayResult[List[CourseRecord]]: ...

    @abstractmethod
    def fetch_course(self, course_id: str) -> GatewayResult[Optional[CourseRecord]]: ...

    @abstractmethod
    def fetch_lectures(self, course_id: str) -> GatewayResult[List[LectureRecord]]: ...

    @abstractmethod
    def fetch_lecture(self, lecture_id: str) -> GatewayResult[Optional[LectureRecord]]: ...

    @abstractmethod
    def fetch_lecture_counts(self) -> GatewayResult[Dict[str, int]]:
        """Number of lectures per course id."""

    # ------------------------------------------------------------------
    # Words and meanings
    # ------------------------------------------------------------------
    @abstractmethod
    def fetch_words(self, lecture_id: str) -> GatewayResult[List[WordRecord]]:
        """Words of one lecture ordered by ``order_in_lecture``."""

    @abstractmethod
    def fetch_words_for_lectures(self, lecture_ids: Sequence[str]) -> GatewayResult[List[WordRecord]]: ...

    @abstractmethod
    def fetch_word(self, word_id: str) -> GatewayResult[Optional[WordRecord]]: ...

    @abstractmethod
    def fetch_meanings(self, word_ids: Iterable[str]) -> GatewayResult[Dict[str, List[MeaningRecord]]]:
        """Meanings grouped by word id, oldest first."""

    @abstractmethod
    def next_order(self, lecture_id: str) -> GatewayResult[int]: ...

    @abstractmethod
    def insert_word(self, lecture_id: str, draft: WordDraft) -> GatewayResult[WordRecord]: ...

    @abstractmethod
    def update_word(self, word_id: str, draft: WordDraft) -> GatewayResult[WordRecord]: ...

    @abstractmethod
    def replace_meanings(
        self, word_id: str, meanings: Sequence[MeaningInput]
    ) -> GatewayResult[List[MeaningRecord]]: ...

    @abstractmethod
    def delete_word(self, word_id: str) -> GatewayResult[None]: ...

    @abstractmethod
    def persist_order(self, lecture_id: str, ordered_word_ids: Sequence[str]) -> GatewayResult[None]:
        """Set ``order_in_lecture`` to each id's index in ``ordered_word_ids``."""

    # ------------------------------------------------------------------
    # Learner notes
    # ------------------------------------------------------------------
    @abstractmethod
    def record_miss(self, user_id: str, word_id: str, note_text: str) -> GatewayResult[None]: ...

    @abstractmethod
    def fetch_miss_counts(self, user_id: str, word_ids: Iterable[str]) -> GatewayResult[Dict[str, int]]: ...

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------
    @contextmanager
    def detached(self) -> Iterator["DataGateway"]:
        """A gateway that stays usable after the current request has ended.

        Stateless gateways hand back themselves.
        """

        yield self
