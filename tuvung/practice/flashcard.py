"""Self-graded flashcard test.

Unlike a practice session every answer stays editable until the test is
finished; scoring happens once, at the end.
"""

from __future__ import annotations

import threading
from typing import List, Optional, Sequence

from pydantic import BaseModel

from .errors import PracticeError
from .matching import expected_answer, is_correct
from .models import Direction, QuestionItem
from .repository import WordMeaningView


class FlashcardLine(BaseModel):
    slot: int
    word_id: str
    prompt: str
    expected: str
    user_answer: str
    correct: bool


class FlashcardSummary(BaseModel):
    total: int
    answered: int
    correct: int
    accuracy: int
    lines: List[FlashcardLine]


class FlashcardTest:
    def __init__(self, items: Sequence[QuestionItem], meanings: WordMeaningView):
        if not items:
            raise PracticeError("no_words", status_code=400)
        self.items: List[QuestionItem] = list(items)
        self.meanings = meanings
        self.answers: List[str] = ["" for _ in self.items]
        self.index = 0
        self.flipped = False
        self.finished = False
        self._summary: Optional[FlashcardSummary] = None
        self.lock = threading.RLock()

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def current(self) -> QuestionItem:
        return self.items[self.index]

    def _ensure_open(self) -> None:
        if self.finished:
            raise PracticeError("test_finished", status_code=409)

    def prompt_for(self, item: QuestionItem) -> str:
        if item.direction is Direction.WORD_TO_MEANING:
            return item.word.text
        return self.meanings.primary_meaning(item.word.word_id) or "—"

    def expected_for(self, item: QuestionItem) -> str:
        return expected_answer(
            item.word.text, self.meanings.meanings_for(item.word.word_id), item.direction
        )

    def set_answer(self, answer: str, index: Optional[int] = None) -> None:
        self._ensure_open()
        position = self.index if index is None else index
        if not 0 <= position < self.total:
            raise PracticeError("invalid_index", status_code=400)
        self.answers[position] = answer or ""

    def previous(self) -> None:
        self._ensure_open()
        if self.index > 0:
            self.index -= 1
            self.flipped = False

    def next(self) -> None:
        """Move forward; past the last card the test finishes."""

        self._ensure_open()
        if self.index + 1 >= self.total:
            self.finish()
            return
        self.index += 1
        self.flipped = False

    def flip(self) -> bool:
        self._ensure_open()
        self.flipped = not self.flipped
        return self.flipped

    def finish(self) -> FlashcardSummary:
        if self._summary is not None:
            return self._summary

        lines = []
        for position, item in enumerate(self.items):
            answer = self.answers[position].strip()
            meanings = self.meanings.meanings_for(item.word.word_id)
            lines.append(
                FlashcardLine(
                    slot=position,
                    word_id=item.word.word_id,
                    prompt=self.prompt_for(item),
                    expected=self.expected_for(item),
                    user_answer=answer,
                    correct=bool(answer) and is_correct(answer, item.word.text, meanings, item.direction),
                )
            )
        correct = sum(1 for line in lines if line.correct)
        self._summary = FlashcardSummary(
            total=self.total,
            answered=sum(1 for line in lines if line.user_answer),
            correct=correct,
            accuracy=round(correct / self.total * 100),
            lines=lines,
        )
        self.finished = True
        return self._summary
