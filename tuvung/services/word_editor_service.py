from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from tuvung.core.config import settings
from tuvung.gateway.base import DataGateway
from tuvung.gateway.records import LectureRecord, MeaningInput, WordDraft, WordRecord
from tuvung.gateway.result import Err
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.reorder import ReorderController
from tuvung.practice.repository import WordMeaningView
from tuvung.schemas.user_schema import CurrentUser
from tuvung.schemas.word_schema import AssetOut, ReorderOut, WordIn, WordListOut, WordOut

logger = logging.getLogger(__name__)

INVALID_ORDER_MESSAGE = "Thứ tự phải là số không âm"


@dataclass(slots=True)
class WordEditorError(Exception):
    """Raised when a word edit is rejected before or during persistence."""

    code: str
    status_code: int = 400
    message: Optional[str] = None

    def __str__(self) -> str:
        return self.message or self.code


def parse_order(raw: Union[int, str, None]) -> Optional[int]:
    """Validate the position typed in the form; blank means "append"."""

    if raw is None:
        return None
    if isinstance(raw, bool):
        raise WordEditorError("invalid_order", message=INVALID_ORDER_MESSAGE)
    if isinstance(raw, int):
        value = raw
    else:
        text = raw.strip()
        if not text:
            return None
        try:
            value = int(text)
        except ValueError:
            raise WordEditorError("invalid_order", message=INVALID_ORDER_MESSAGE) from None
    if value < 0:
        raise WordEditorError("invalid_order", message=INVALID_ORDER_MESSAGE)
    return value


def clean_meanings(meanings: Sequence[MeaningInput]) -> List[MeaningInput]:
    cleaned = []
    for item in meanings:
        text = (item.meaning or "").strip()
        if text:
            cleaned.append(MeaningInput(meaning=text, part_of_speech=item.part_of_speech or None))
    return cleaned


class WordEditorService:
    """Word management for a lecture; mutations require owning the course."""

    def __init__(self, gateway: DataGateway, storage: SupabaseStorage, user: CurrentUser):
        self.gateway = gateway
        self.storage = storage
        self.user = user

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _value(self, result, code: str = "backend_unavailable"):
        if isinstance(result, Err):
            logger.error("Gateway call failed (%s): %s", result.code, result.reason)
            if result.code == "not_found":
                raise WordEditorError("word_not_found", status_code=404)
            raise WordEditorError(code, status_code=502, message=result.reason)
        return result.value

    def _lecture_rights(self, lecture_id: str) -> Tuple[LectureRecord, bool]:
        lecture = self._value(self.gateway.fetch_lecture(lecture_id))
        if lecture is None:
            raise WordEditorError("lecture_not_found", status_code=404)
        course = self._value(self.gateway.fetch_course(lecture.course_id))
        can_edit = course is not None and course.creator_id == self.user.id
        return lecture, can_edit

    def _require_edit(self, lecture_id: str) -> LectureRecord:
        lecture, can_edit = self._lecture_rights(lecture_id)
        if not can_edit:
            raise WordEditorError("forbidden", status_code=403)
        return lecture

    def _word(self, word_id: str) -> WordRecord:
        word = self._value(self.gateway.fetch_word(word_id))
        if word is None:
            raise WordEditorError("word_not_found", status_code=404)
        return word

    def _upload_pending_audio(self, audio_base64: Optional[str]) -> Optional[str]:
        if not audio_base64:
            return None
        try:
            data = base64.b64decode(audio_base64, validate=True)
        except (binascii.Error, ValueError):
            raise WordEditorError("invalid_audio") from None
        result = self.storage.upload_asset(data, "phrase.wav", settings.WORD_AUDIO_BUCKET, "audio/wav")
        return self._value(result, code="upload_failed")

    def to_out(self, word: WordRecord, view: WordMeaningView) -> WordOut:
        summary = view.summary(word.word_id)
        return WordOut(
            word_id=word.word_id,
            lecture_id=word.lecture_id,
            text=word.text,
            ipa=word.ipa,
            audio_path=word.audio_url,
            audio_url=self.storage.resolve_public_url(word.audio_url, settings.WORD_AUDIO_BUCKET),
            image_path=word.image_url,
            image_url=self.storage.resolve_public_url(word.image_url, settings.WORD_IMAGE_BUCKET),
            order_in_lecture=word.order_in_lecture,
            meanings=view.meanings_for(word.word_id),
            meaning_summary=summary or "-",
        )

    def _view(self, words: Sequence[WordRecord]) -> WordMeaningView:
        meanings = self._value(self.gateway.fetch_meanings([word.word_id for word in words]))
        return WordMeaningView(words, meanings)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_words(self, lecture_id: str, query: str = "") -> WordListOut:
        _, can_edit = self._lecture_rights(lecture_id)
        words = self._value(self.gateway.fetch_words(lecture_id))
        view = self._view(words)
        visible = view.filter(query)
        return WordListOut(
            lecture_id=lecture_id,
            query=query or "",
            can_edit=can_edit,
            can_reorder=can_edit and not (query or "").strip(),
            total=len(words),
            words=[self.to_out(word, view) for word in visible],
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_word(self, lecture_id: str, payload: WordIn) -> WordOut:
        text = payload.text.strip()
        if not text:
            raise WordEditorError("empty_text")
        order = parse_order(payload.order_in_lecture)
        self._require_edit(lecture_id)

        if order is None:
            order = self._value(self.gateway.next_order(lecture_id))
        audio_path = self._upload_pending_audio(payload.audio_base64) or payload.audio_url

        draft = WordDraft(
            text=text,
            ipa=(payload.ipa or "").strip() or None,
            audio_url=audio_path,
            image_url=payload.image_url,
            order_in_lecture=order,
        )
        word = self._value(self.gateway.insert_word(lecture_id, draft), code="save_failed")
        meanings = clean_meanings(payload.meanings)
        saved = self._value(self.gateway.replace_meanings(word.word_id, meanings), code="save_failed")
        logger.info("Word %s created in lecture %s by %s", word.word_id, lecture_id, self.user.id)
        return self.to_out(word, WordMeaningView([word], {word.word_id: saved}))

    def update_word(self, word_id: str, payload: WordIn) -> WordOut:
        text = payload.text.strip()
        if not text:
            raise WordEditorError("empty_text")
        order = parse_order(payload.order_in_lecture)
        existing = self._word(word_id)
        self._require_edit(existing.lecture_id)

        if order is None:
            order = existing.order_in_lecture
        if order is None:
            order = self._value(self.gateway.next_order(existing.lecture_id))
        audio_path = self._upload_pending_audio(payload.audio_base64) or payload.audio_url

        draft = WordDraft(
            text=text,
            ipa=(payload.ipa or "").strip() or None,
            audio_url=audio_path,
            image_url=payload.image_url,
            order_in_lecture=order,
        )
        word = self._value(self.gateway.update_word(word_id, draft), code="save_failed")
        saved = self._value(
            self.gateway.replace_meanings(word_id, clean_meanings(payload.meanings)), code="save_failed"
        )
        logger.info("Word %s updated by %s", word_id, self.user.id)
        return self.to_out(word, WordMeaningView([word], {word_id: saved}))

    def delete_word(self, word_id: str) -> WordListOut:
        word = self._word(word_id)
        lecture_id = word.lecture_id
        self._require_edit(lecture_id)

        siblings = self._value(self.gateway.fetch_words(lecture_id))
        self._value(self.gateway.delete_word(word_id), code="delete_failed")
        logger.info("Word %s deleted from lecture %s by %s", word_id, lecture_id, self.user.id)

        controller = ReorderController(siblings, can_edit=True)
        outcome = controller.remove(word_id, lambda ids: self.gateway.persist_order(lecture_id, ids))
        view = self._view(outcome.words)
        return WordListOut(
            lecture_id=lecture_id,
            can_edit=True,
            can_reorder=True,
            total=len(outcome.words),
            words=[self.to_out(item, view) for item in outcome.words],
        )

    def reorder(self, lecture_id: str, dragged_id: str, target_id: str, query: str = "") -> ReorderOut:
        _, can_edit = self._lecture_rights(lecture_id)
        words = self._value(self.gateway.fetch_words(lecture_id))
        controller = ReorderController(words, can_edit=can_edit, query=query)
        if not controller.can_reorder:
            raise WordEditorError("reorder_not_allowed", status_code=403)

        outcome = controller.apply(
            dragged_id, target_id, lambda ids: self.gateway.persist_order(lecture_id, ids)
        )
        if outcome.error:
            logger.warning("Reorder of lecture %s not persisted: %s", lecture_id, outcome.error)
        view = self._view(outcome.words)
        return ReorderOut(
            changed=outcome.changed,
            persisted=outcome.persisted,
            rolled_back=outcome.rolled_back,
            error=outcome.error,
            words=[self.to_out(word, view) for word in outcome.words],
        )

    def upload_asset(
        self, bucket: str, filename: str, data: bytes, content_type: Optional[str] = None
    ) -> AssetOut:
        if bucket not in self.storage.buckets:
            raise WordEditorError("unknown_bucket", status_code=400)
        if not data:
            raise WordEditorError("empty_file")
        path = self._value(
            self.storage.upload_asset(data, filename, bucket, content_type), code="upload_failed"
        )
        return AssetOut(bucket=bucket, path=path, public_url=self.storage.resolve_public_url(path, bucket))
