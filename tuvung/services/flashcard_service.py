from __future__ import annotations

import logging
import random
from typing import Optional

from tuvung.core.config import settings
from tuvung.gateway.base import DataGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.builder import pick_flashcard_items
from tuvung.practice.errors import PracticeError
from tuvung.practice.flashcard import FlashcardTest
from tuvung.practice.models import Direction
from tuvung.practice.store import SessionStore
from tuvung.schemas.flashcard_schema import FlashcardCardOut, FlashcardTestCreate, FlashcardTestOut
from tuvung.schemas.user_schema import CurrentUser

from .practice_service import load_lecture_words, load_view

logger = logging.getLogger(__name__)


class FlashcardService:
    def __init__(
        self,
        gateway: DataGateway,
        store: SessionStore[FlashcardTest],
        storage: SupabaseStorage,
        user: CurrentUser,
        rng: Optional[random.Random] = None,
    ):
        self.gateway = gateway
        self.store = store
        self.storage = storage
        self.user = user
        self.rng = rng

    def create_test(self, payload: FlashcardTestCreate) -> FlashcardTestOut:
        words = load_lecture_words(self.gateway, payload.lecture_ids)
        if not words:
            raise PracticeError("no_words", status_code=400)
        items = pick_flashcard_items(words, payload.count, rng=self.rng)
        test = FlashcardTest(items, load_view(self.gateway, [item.word for item in items]))
        test_id = self.store.create(self.user.id, test)
        logger.info("Flashcard test %s created for user %s with %s cards", test_id, self.user.id, test.total)
        return self.build_view(test_id, test)

    def get_test(self, test_id: str) -> FlashcardTestOut:
        test = self.store.get(test_id, self.user.id)
        with test.lock:
            return self.build_view(test_id, test)

    def set_answer(self, test_id: str, answer: str, index: Optional[int] = None) -> FlashcardTestOut:
        test = self.store.get(test_id, self.user.id)
        with test.lock:
            test.set_answer(answer, index)
            return self.build_view(test_id, test)

    def previous(self, test_id: str) -> FlashcardTestOut:
        test = self.store.get(test_id, self.user.id)
        with test.lock:
            test.previous()
            return self.build_view(test_id, test)

    def next(self, test_id: str) -> FlashcardTestOut:
        test = self.store.get(test_id, self.user.id)
        with test.lock:
            test.next()
            return self.build_view(test_id, test)

    def flip(self, test_id: str) -> FlashcardTestOut:
        test = self.store.get(test_id, self.user.id)
        with test.lock:
            test.flip()
            return self.build_view(test_id, test)

    def finish(self, test_id: str) -> FlashcardTestOut:
        test = self.store.get(test_id, self.user.id)
        with test.lock:
            summary = test.finish()
            logger.info("Flashcard test %s finished: %s/%s", test_id, summary.correct, summary.total)
            return self.build_view(test_id, test)

    def reset(self, test_id: str) -> bool:
        return self.store.discard(test_id, self.user.id)

    def build_view(self, test_id: str, test: FlashcardTest) -> FlashcardTestOut:
        card = None
        if not test.finished:
            item = test.current
            word = item.word
            shows_word = item.direction is Direction.WORD_TO_MEANING
            card = FlashcardCardOut(
                index=test.index,
                word_id=word.word_id,
                direction=item.direction,
                prompt=test.prompt_for(item),
                ipa=word.ipa if shows_word else None,
                audio_url=(
                    self.storage.resolve_public_url(word.audio_url, settings.WORD_AUDIO_BUCKET)
                    if shows_word
                    else None
                ),
                answer=test.answers[test.index],
                back=test.expected_for(item) if test.flipped else None,
            )
        return FlashcardTestOut(
            test_id=test_id,
            index=test.index,
            total=test.total,
            flipped=test.flipped,
            finished=test.finished,
            answers=list(test.answers),
            card=card,
            summary=test.finish() if test.finished else None,
        )
