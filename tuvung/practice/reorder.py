"""Drag-and-drop reordering of the words of a lecture.

Dropping stages the new order, hands the ids to a persist callable and only
then commits. When persisting fails the staged order is rolled back unless
``rollback_on_failure`` is disabled, in which case the optimistic order stays.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from tuvung.core.config import settings
from tuvung.gateway.records import WordRecord
from tuvung.gateway.result import Err, GatewayResult, Ok

logger = logging.getLogger(__name__)

PersistOrder = Callable[[List[str]], GatewayResult[None]]


def sort_by_order(words: Sequence[WordRecord]) -> List[WordRecord]:
    return sorted(words, key=lambda word: word.order_in_lecture or 0)


def move(words: Sequence[WordRecord], from_index: int, to_index: int) -> List[WordRecord]:
    """Remove the word at ``from_index`` and insert it at ``to_index``."""

    moved = list(words)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def reindex(words: Sequence[WordRecord]) -> List[WordRecord]:
    """Renumber positions 0..N-1 following list order."""

    return [
        word if word.order_in_lecture == position else word.model_copy(update={"order_in_lecture": position})
        for position, word in enumerate(words)
    ]


def compact_after_delete(words: Sequence[WordRecord], deleted_word_id: str) -> List[WordRecord]:
    remaining = [word for word in sort_by_order(words) if word.word_id != deleted_word_id]
    return reindex(remaining)


class ReorderOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    changed: bool
    persisted: bool = False
    rolled_back: bool = False
    error: Optional[str] = None
    words: List[WordRecord]


class ReorderController:
    def __init__(
        self,
        words: Sequence[WordRecord],
        *,
        can_edit: bool,
        query: str = "",
        rollback_on_failure: Optional[bool] = None,
    ):
        self._words = sort_by_order(words)
        self.can_edit = can_edit
        self.query = query or ""
        self.rollback_on_failure = (
            settings.REORDER_ROLLBACK_ON_FAILURE if rollback_on_failure is None else rollback_on_failure
        )
        self._dragging: Optional[str] = None
        self._hover: Optional[str] = None
        self._preview: Optional[List[WordRecord]] = None

    @property
    def can_reorder(self) -> bool:
        """Only the course owner, and only on the unfiltered list."""

        return self.can_edit and not self.query.strip()

    @property
    def words(self) -> List[WordRecord]:
        return list(self._words)

    @property
    def dragging(self) -> Optional[str]:
        return self._dragging

    def _index_of(self, words: Sequence[WordRecord], word_id: str) -> int:
        for position, word in enumerate(words):
            if word.word_id == word_id:
                return position
        return -1

    # ------------------------------------------------------------------
    # Drag gesture
    # ------------------------------------------------------------------
    def begin_drag(self, word_id: str) -> bool:
        if not self.can_reorder or self._index_of(self._words, word_id) < 0:
            return False
        self._dragging = word_id
        self._hover = None
        self._preview = None
        return True

    def drag_over(self, word_id: str) -> List[WordRecord]:
        """Update the transient preview while hovering ``word_id``."""

        if self._dragging is None or word_id == self._dragging:
            return self.preview()
        source = self._index_of(self._words, self._dragging)
        target = self._index_of(self._words, word_id)
        if source < 0 or target < 0:
            return self.preview()
        self._hover = word_id
        self._preview = move(self._words, source, target)
        return self.preview()

    def preview(self) -> List[WordRecord]:
        return list(self._preview if self._preview is not None else self._words)

    def cancel(self) -> None:
        self._dragging = None
        self._hover = None
        self._preview = None

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def stage(self, word_id: str, target_id: str) -> Optional[List[WordRecord]]:
        """Order resulting from dropping ``word_id`` on ``target_id``.

        Computed from the committed order, not from the preview.
        """

        source = self._index_of(self._words, word_id)
        target = self._index_of(self._words, target_id)
        if source < 0 or target < 0 or source == target:
            return None
        return reindex(move(self._words, source, target))

    def drop(self, persist: PersistOrder, target_id: Optional[str] = None) -> ReorderOutcome:
        dragged = self._dragging
        target = target_id or self._hover
        self.cancel()

        if not self.can_reorder or dragged is None or target is None:
            return ReorderOutcome(changed=False, words=self.words)
        return self.apply(dragged, target, persist)

    def apply(self, word_id: str, target_id: str, persist: PersistOrder) -> ReorderOutcome:
        if not self.can_reorder:
            return ReorderOutcome(changed=False, words=self.words)

        staged = self.stage(word_id, target_id)
        if staged is None:
            return ReorderOutcome(changed=False, words=self.words)
        return self.commit(staged, persist)

    def commit(self, staged: List[WordRecord], persist: PersistOrder) -> ReorderOutcome:
        previous = self._words
        self._words = staged
        result = persist([word.word_id for word in staged])
        if isinstance(result, Ok):
            return ReorderOutcome(changed=True, persisted=True, words=self.words)

        logger.warning("Persisting word order failed: %s", result.reason)
        if self.rollback_on_failure:
            self._words = previous
            return ReorderOutcome(changed=False, rolled_back=True, error=result.reason, words=self.words)
        return ReorderOutcome(changed=True, error=result.reason, words=self.words)

    def remove(self, word_id: str, persist: PersistOrder) -> ReorderOutcome:
        """Compact positions after ``word_id`` was deleted and persist them.

        The word is already gone from the backend, so a failed persist never
        brings it back; the compacted order is kept locally either way.
        """

        if self._index_of(self._words, word_id) < 0:
            return ReorderOutcome(changed=False, words=self.words)
        self._words = compact_after_delete(self._words, word_id)
        result = persist([word.word_id for word in self._words])
        if isinstance(result, Err):
            logger.warning("Persisting compacted order failed: %s", result.reason)
            return ReorderOutcome(changed=True, error=result.reason, words=self.words)
        return ReorderOutcome(changed=True, persisted=True, words=self.words)
