"""State machine driving one practice session.

Phases: ``configuring`` -> ``active`` <-> ``reviewing`` -> ``completed``.

The engine never sleeps. After an answer that should move on by itself it
records a :class:`FollowUp` (``advance`` or ``complete`` plus a delay); the
client applies it by calling :meth:`PracticeEngine.advance` once the delay has
elapsed, or :meth:`PracticeEngine.settle` applies it immediately.

Requests for the same session may arrive on several threadpool workers, so
every transition runs under the engine's ``lock``.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Sequence

from tuvung.core.config import settings

from .errors import PracticeError
from .matching import expected_answer, is_correct, mask_hint, normalize
from .models import (
    Direction,
    FollowUp,
    PracticeResult,
    QuestionItem,
    ResultLine,
    SessionPhase,
    SessionState,
    SessionSummary,
    SubmitOutcome,
)
from .repository import WordMeaningView

logger = logging.getLogger(__name__)

CORRECT_MESSAGE = "✅ Chính xác!"
UNANSWERED_MESSAGE = "Câu này chưa được trả lời"


def hint_message(hint: str) -> str:
    return f"Gợi ý: {hint}"


def miss_message(expected: str) -> str:
    return f"❌ Sai. Đáp án: {expected}"


def review_message(result: PracticeResult, expected: str) -> str:
    if result.correct:
        return f'✅ Chính xác! Bạn đã nhập: "{result.user_answer}" ({result.attempts} lần thử)'
    return (
        f'❌ Sai. Bạn đã nhập: "{result.user_answer}" | '
        f'Đáp án đúng: "{expected}" ({result.attempts} lần thử)'
    )


class PracticeEngine:
    def __init__(
        self,
        meanings: WordMeaningView,
        *,
        auto_advance: bool = True,
        correct_delay_ms: Optional[int] = None,
        wrong_delay_ms: Optional[int] = None,
    ):
        self.meanings = meanings
        self.correct_delay_ms = (
            settings.PRACTICE_CORRECT_DELAY_MS if correct_delay_ms is None else correct_delay_ms
        )
        self.wrong_delay_ms = settings.PRACTICE_WRONG_DELAY_MS if wrong_delay_ms is None else wrong_delay_ms
        self._state = SessionState(auto_advance=auto_advance)
        # Reentrant: advance() settles, and callers may hold it across a view.
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        """A detached copy; mutate the session only through the operations."""

        with self.lock:
            return self._state.model_copy(deep=True)

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def current_item(self) -> Optional[QuestionItem]:
        state = self._state
        if state.phase in (SessionPhase.CONFIGURING, SessionPhase.COMPLETED) or not state.items:
            return None
        return state.items[state.index]

    def prompt_for(self, item: QuestionItem) -> str:
        if item.direction is Direction.WORD_TO_MEANING:
            return item.word.text
        return self.meanings.primary_meaning(item.word.word_id) or "—"

    def expected_for(self, item: QuestionItem) -> str:
        return expected_answer(
            item.word.text, self.meanings.meanings_for(item.word.word_id), item.direction
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self, items: Sequence[QuestionItem], auto_advance: Optional[bool] = None) -> SessionState:
        with self.lock:
            if self._state.phase is not SessionPhase.CONFIGURING:
                raise PracticeError("session_already_started", status_code=409)
            if not items:
                raise PracticeError("no_words", status_code=400)

            auto = self._state.auto_advance if auto_advance is None else auto_advance
            self._state = SessionState(phase=SessionPhase.ACTIVE, items=list(items), auto_advance=auto)
            logger.debug("Practice session started with %s questions", len(items))
            return self.state

    def submit(self, answer: str) -> SubmitOutcome:
        with self.lock:
            return self._submit(answer)

    def advance(self) -> SessionState:
        with self.lock:
            state = self._state
            if state.phase is SessionPhase.REVIEWING:
                self._review_forward()
                return self.state
            if state.phase is not SessionPhase.ACTIVE:
                raise PracticeError("session_not_active", status_code=409)

            if state.pending is not None:
                return self.settle()
            if not state.answered:
                raise PracticeError("question_not_answered", status_code=409)

            if state.index + 1 >= state.total:
                self._complete()
            else:
                self._enter_live(state.index + 1)
            return self.state

    def back(self) -> SessionState:
        with self.lock:
            state = self._state
            if state.phase not in (SessionPhase.ACTIVE, SessionPhase.REVIEWING):
                raise PracticeError("session_not_active", status_code=409)
            if state.index == 0:
                return self.state

            state.pending = None
            self._show_review(state.index - 1)
            return self.state

    def settle(self) -> SessionState:
        """Apply the pending follow-up now instead of after its delay."""

        with self.lock:
            state = self._state
            pending, state.pending = state.pending, None
            if pending is None:
                return self.state
            if pending.kind == "complete":
                self._complete()
            else:
                self._enter_live(state.index + 1)
            return self.state

    def restart(self) -> SessionState:
        """Drop every result and go back to configuring."""

        with self.lock:
            self._state = SessionState(auto_advance=self._state.auto_advance)
            return self.state

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    def summary(self) -> SessionSummary:
        with self.lock:
            state = self._state.model_copy(deep=True)
        results = state.results
        correct = sum(1 for result in results if result.correct)
        lines: List[ResultLine] = [
            ResultLine(
                slot=result.item.slot,
                word_id=result.item.word.word_id,
                prompt=self.prompt_for(result.item),
                expected=self.expected_for(result.item),
                user_answer=result.user_answer,
                correct=result.correct,
                attempts=result.attempts,
            )
            for result in results
        ]
        accuracy = round(correct / len(results) * 100) if results else 0
        return SessionSummary(
            total=state.total,
            answered=len(results),
            correct=correct,
            wrong=len(results) - correct,
            accuracy=accuracy,
            lines=lines,
        )

    # ------------------------------------------------------------------
    # Internals (callers hold ``lock``)
    # ------------------------------------------------------------------
    def _submit(self, answer: str) -> SubmitOutcome:
        state = self._state
        if state.phase is not SessionPhase.ACTIVE or state.answered:
            raise PracticeError("not_accepting_answers", status_code=409)

        value = (answer or "").strip()
        if not normalize(value):
            return SubmitOutcome(accepted=False)

        item = state.items[state.index]
        meanings = self.meanings.meanings_for(item.word.word_id)
        expected = expected_answer(item.word.text, meanings, item.direction)
        is_last = state.index + 1 >= state.total

        if is_correct(value, item.word.text, meanings, item.direction):
            result = PracticeResult(item=item, user_answer=value, correct=True, attempts=state.attempts + 1)
            self._finalize(result, CORRECT_MESSAGE)
            follow_up = None
            if is_last:
                follow_up = FollowUp(kind="complete", delay_ms=self.correct_delay_ms)
            elif state.auto_advance:
                follow_up = FollowUp(kind="advance", delay_ms=self.correct_delay_ms)
            state.pending = follow_up
            return SubmitOutcome(accepted=True, correct=True, result=result, follow_up=follow_up)

        if state.attempts == 0:
            hint = mask_hint(expected)
            state.attempts = 1
            state.input_text = ""
            state.message = hint_message(hint)
            return SubmitOutcome(accepted=True, correct=False, hint=hint)

        result = PracticeResult(item=item, user_answer=value, correct=False, attempts=state.attempts + 1)
        self._finalize(result, miss_message(expected))
        follow_up = FollowUp(kind="complete", delay_ms=self.wrong_delay_ms) if is_last else None
        state.pending = follow_up
        return SubmitOutcome(
            accepted=True,
            correct=False,
            expected=expected,
            result=result,
            missed_word_id=item.word.word_id,
            follow_up=follow_up,
        )

    def _finalize(self, result: PracticeResult, message: str) -> None:
        state = self._state
        # One result per slot; index never exceeds the watermark.
        if state.index < len(state.results):
            state.results[state.index] = result
        else:
            state.results.append(result)
        state.attempts = result.attempts
        state.answered = True
        state.input_text = result.user_answer
        state.message = message

    def _enter_live(self, index: int) -> None:
        state = self._state
        state.phase = SessionPhase.ACTIVE
        state.index = index
        state.watermark = max(state.watermark, index)
        state.attempts = 0
        state.answered = False
        state.input_text = ""
        state.message = ""
        state.pending = None

    def _show_review(self, index: int) -> None:
        state = self._state
        state.phase = SessionPhase.REVIEWING
        state.index = index
        state.attempts = 0
        if index < len(state.results):
            result = state.results[index]
            state.answered = True
            state.input_text = result.user_answer
            state.attempts = result.attempts
            state.message = review_message(result, self.expected_for(result.item))
        else:
            state.answered = False
            state.input_text = ""
            state.message = UNANSWERED_MESSAGE

    def _review_forward(self) -> None:
        state = self._state
        target = state.index + 1
        if target > state.watermark:
            return
        if target < state.watermark:
            self._show_review(target)
            return

        # Back at the frontier: live again.
        if target < len(state.results):
            result = state.results[target]
            state.phase = SessionPhase.ACTIVE
            state.index = target
            state.answered = True
            state.attempts = result.attempts
            state.input_text = result.user_answer
            state.message = review_message(result, self.expected_for(result.item))
            state.pending = None
        else:
            self._enter_live(target)

    def _complete(self) -> None:
        state = self._state
        state.phase = SessionPhase.COMPLETED
        state.pending = None
        logger.debug(
            "Practice session completed: %s/%s correct",
            sum(1 for result in state.results if result.correct),
            len(state.results),
        )
