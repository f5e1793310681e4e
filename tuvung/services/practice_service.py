from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from fastapi import BackgroundTasks

from tuvung.core.config import settings
from tuvung.gateway.base import DataGateway
from tuvung.gateway.records import WordRecord
from tuvung.gateway.result import Err
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.builder import build_sequence
from tuvung.practice.engine import PracticeEngine
from tuvung.practice.errors import PracticeError
from tuvung.practice.models import Direction, SessionPhase
from tuvung.practice.repository import WordMeaningView
from tuvung.practice.store import SessionStore
from tuvung.schemas.practice_schema import (
    AnswerOut,
    MissedWordOut,
    PracticeSessionCreate,
    PracticeSessionOut,
    PromptOut,
)
from tuvung.schemas.user_schema import CurrentUser

logger = logging.getLogger(__name__)

PLACEHOLDER_MEANING = "Nhập nghĩa tiếng Việt..."
PLACEHOLDER_WORD = "Nhập từ tiếng Anh..."
PLACEHOLDER_REVIEW = "Chế độ xem lại (chỉ đọc)"


def _unwrap(result, code: str = "backend_unavailable"):
    if isinstance(result, Err):
        logger.error("Gateway call failed (%s): %s", result.code, result.reason)
        raise PracticeError(code, status_code=502)
    return result.value


def load_lecture_words(gateway: DataGateway, lecture_ids: Sequence[str]) -> List[WordRecord]:
    """Words of the given lectures, lecture by lecture in the order requested."""

    ids = list(dict.fromkeys(lecture_ids))
    words = _unwrap(gateway.fetch_words_for_lectures(ids))
    rank = {lecture_id: position for position, lecture_id in enumerate(ids)}
    return sorted(words, key=lambda word: (rank.get(word.lecture_id, len(rank)), word.order_in_lecture or 0))


def load_view(gateway: DataGateway, words: Sequence[WordRecord]) -> WordMeaningView:
    meanings = _unwrap(gateway.fetch_meanings([word.word_id for word in words]))
    return WordMeaningView(words, meanings)


class PracticeService:
    """Runs practice sessions for one learner."""

    def __init__(
        self,
        gateway: DataGateway,
        store: SessionStore[PracticeEngine],
        storage: SupabaseStorage,
        user: CurrentUser,
        rng: Optional[random.Random] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.storage = storage
        self.user = user
        self.rng = rng

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start_session(self, payload: PracticeSessionCreate) -> PracticeSessionOut:
        words = load_lecture_words(self.gateway, payload.lecture_ids)
        if payload.word_ids is not None:
            selected = set(payload.word_ids)
            words = [word for word in words if word.word_id in selected]
        if not words:
            raise PracticeError("no_words", status_code=400)

        view = load_view(self.gateway, words)
        question_count = min(payload.question_count, settings.PRACTICE_MAX_QUESTIONS)
        items = build_sequence(
            words,
            question_count,
            shuffle=payload.shuffle,
            mode=payload.direction,
            rng=self.rng,
        )
        engine = PracticeEngine(view, auto_advance=payload.auto_advance)
        engine.start(items)
        session_id = self.store.create(self.user.id, engine)
        logger.info(
            "Practice session %s created for user %s: %s questions over %s words (%s)",
            session_id,
            self.user.id,
            len(items),
            len(words),
            payload.direction.value,
        )
        return self.build_view(session_id, engine)

    def get_session(self, session_id: str) -> PracticeSessionOut:
        engine = self.store.get(session_id, self.user.id)
        with engine.lock:
            return self.build_view(session_id, engine)

    def submit(self, session_id: str, answer: str, background_tasks: BackgroundTasks) -> AnswerOut:
        engine = self.store.get(session_id, self.user.id)
        with engine.lock:
            outcome = engine.submit(answer)
            view = self.build_view(session_id, engine)
        if outcome.missed_word_id:
            background_tasks.add_task(record_miss, self.gateway, self.user.id, outcome.missed_word_id)
        return AnswerOut(
            accepted=outcome.accepted,
            correct=outcome.correct,
            hint=outcome.hint,
            expected=outcome.expected,
            session=view,
        )

    def advance(self, session_id: str) -> PracticeSessionOut:
        engine = self.store.get(session_id, self.user.id)
        with engine.lock:
            engine.advance()
            if engine.phase is SessionPhase.COMPLETED:
                logger.info("Practice session %s completed", session_id)
            return self.build_view(session_id, engine)

    def back(self, session_id: str) -> PracticeSessionOut:
        engine = self.store.get(session_id, self.user.id)
        with engine.lock:
            engine.back()
            return self.build_view(session_id, engine)

    def restart(self, session_id: str) -> PracticeSessionOut:
        engine = self.store.get(session_id, self.user.id)
        with engine.lock:
            engine.restart()
            logger.info("Practice session %s restarted", session_id)
            return self.build_view(session_id, engine)

    # ------------------------------------------------------------------
    # Configuration screen
    # ------------------------------------------------------------------
    def top_missed_words(self, lecture_ids: Sequence[str], limit: int = 10) -> List[MissedWordOut]:
        words = load_lecture_words(self.gateway, lecture_ids)
        if not words:
            return []
        counts: Dict[str, int] = _unwrap(
            self.gateway.fetch_miss_counts(self.user.id, [word.word_id for word in words])
        )
        ranked = sorted(
            (word for word in words if counts.get(word.word_id)),
            key=lambda word: counts[word.word_id],
            reverse=True,
        )
        return [
            MissedWordOut(
                word_id=word.word_id,
                text=word.text,
                lecture_id=word.lecture_id,
                miss_count=counts[word.word_id],
            )
            for word in ranked[:limit]
        ]

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def build_view(self, session_id: str, engine: PracticeEngine) -> PracticeSessionOut:
        state = engine.state
        item = engine.current_item
        prompt = None
        if item is not None:
            if item.direction is Direction.WORD_TO_MEANING:
                prompt = PromptOut(
                    word_id=item.word.word_id,
                    direction=item.direction,
                    text=item.word.text,
                    ipa=item.word.ipa,
                    audio_url=self.storage.resolve_public_url(item.word.audio_url, settings.WORD_AUDIO_BUCKET),
                    placeholder=PLACEHOLDER_MEANING,
                )
            else:
                prompt = PromptOut(
                    word_id=item.word.word_id,
                    direction=item.direction,
                    text=engine.prompt_for(item),
                    placeholder=PLACEHOLDER_WORD,
                )
            if state.read_only:
                prompt = prompt.model_copy(update={"placeholder": PLACEHOLDER_REVIEW})

        return PracticeSessionOut(
            session_id=session_id,
            phase=state.phase,
            index=state.index,
            total=state.total,
            watermark=state.watermark,
            attempts=state.attempts,
            answered=state.answered,
            read_only=state.read_only,
            input_text=state.input_text,
            message=state.message,
            auto_advance=state.auto_advance,
            prompt=prompt,
            follow_up=state.pending,
            summary=engine.summary() if state.phase is SessionPhase.COMPLETED else None,
        )


def record_miss(gateway: DataGateway, user_id: str, word_id: str) -> None:
    """Fire-and-forget note for a finalized miss; failures are only logged."""

    with gateway.detached() as background:
        result = background.record_miss(user_id, word_id, settings.PRACTICE_MISS_NOTE)
    if isinstance(result, Err):
        logger.warning("Could not record miss for word %s: %s", word_id, result.reason)

