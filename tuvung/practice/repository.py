"""Read-only join of words with their meanings."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from tuvung.gateway.records import MeaningRecord, WordRecord

MeaningLike = Union[MeaningRecord, str]


def _meaning_text(item: MeaningLike) -> str:
    if isinstance(item, MeaningRecord):
        return item.meaning
    return str(item)


class WordMeaningView:
    """Words of one or more lectures together with their meaning lists.

    Meanings are kept in the order they were added; the first one is the
    primary meaning used as prompt and as hint target.
    """

    def __init__(
        self,
        words: Iterable[WordRecord],
        meanings: Optional[Mapping[str, Sequence[MeaningLike]]] = None,
    ):
        self._words: List[WordRecord] = list(words)
        self._meanings: Dict[str, List[str]] = {}
        for word_id, items in (meanings or {}).items():
            texts = [_meaning_text(item).strip() for item in items]
            self._meanings[word_id] = [text for text in texts if text]

    def meanings_for(self, word_id: str) -> List[str]:
        return list(self._meanings.get(word_id, []))

    def primary_meaning(self, word_id: str) -> str:
        meanings = self._meanings.get(word_id) or []
        return meanings[0] if meanings else ""

    def summary(self, word_id: str, limit: int = 3) -> str:
        return " / ".join(self._meanings.get(word_id, [])[:limit])

    def ordered(self) -> List[WordRecord]:
        """Words sorted by position; a missing position counts as 0."""

        return sorted(self._words, key=lambda word: word.order_in_lecture or 0)

    def filter(self, query: str) -> List[WordRecord]:
        """Case-insensitive substring match on the text or the IPA."""

        needle = (query or "").strip().lower()
        ordered = self.ordered()
        if not needle:
            return ordered
        return [
            word
            for word in ordered
            if needle in word.text.lower() or needle in (word.ipa or "").lower()
        ]
