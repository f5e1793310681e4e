"""Answer normalisation, scoring and hints."""

from __future__ import annotations

import unicodedata
from typing import Iterable, Sequence

from .models import Direction

# "đ" has no canonical decomposition, so NFD leaves it alone.
_EXTRA_FOLDING = str.maketrans({"đ": "d", "Đ": "D"})


def normalize(text: str | None) -> str:
    return (text or "").strip().lower()


def strip_diacritics(text: str | None) -> str:
    """Fold Vietnamese accents: ``"Hà Nội"`` -> ``"ha noi"``."""

    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.translate(_EXTRA_FOLDING).lower()


def matches_word(answer: str, word_text: str) -> bool:
    """Typed word must equal the target, ignoring case and outer spaces."""

    value = normalize(answer)
    return bool(value) and value == normalize(word_text)


def matches_meaning(answer: str, meanings: Iterable[str]) -> bool:
    """Typed meaning must be contained in one of the recorded meanings.

    A plain substring match is tried first, then the accent-folded forms are
    compared so ``"Ha noi"`` is accepted for ``"Hà Nội"``.
    """

    value = normalize(answer)
    if not value:
        return False
    folded_value = strip_diacritics(value)
    for meaning in meanings:
        candidate = normalize(meaning)
        if value in candidate:
            return True
        if folded_value in strip_diacritics(candidate):
            return True
    return False


def mask_hint(target: str | None) -> str:
    """Keep the first and last characters, mask the middle with ``*``."""

    text = (target or "").strip()
    if len(text) <= 2:
        return "*" * len(text)
    return f"{text[0]}{'*' * (len(text) - 2)}{text[-1]}"


def expected_answer(word_text: str, meanings: Sequence[str], direction: Direction) -> str:
    """The answer shown after a miss: the word, or the primary meaning."""

    if direction is Direction.MEANING_TO_WORD:
        return word_text
    return meanings[0] if meanings else ""


def is_correct(answer: str, word_text: str, meanings: Sequence[str], direction: Direction) -> bool:
    if direction is Direction.MEANING_TO_WORD:
        return matches_word(answer, word_text)
    return matches_meaning(answer, meanings)
