"""Turns the selected words into an ordered list of practice questions."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from tuvung.gateway.records import WordRecord

from .models import Direction, DirectionMode, QuestionItem


def build_sequence(
    words: Sequence[WordRecord],
    question_count: int,
    *,
    shuffle: bool = False,
    mode: DirectionMode = DirectionMode.WORD_TO_MEANING,
    rng: Optional[random.Random] = None,
) -> List[QuestionItem]:
    """Build the question sequence for a session.

    The sequence has ``max(question_count, len(words))`` slots; when more
    questions than words are requested the words are cycled in order.
    Shuffling permutes the whole cycled sequence. In random mode every slot
    draws its own direction. An empty ``words`` yields an empty list.
    """

    base = list(words)
    if not base:
        return []

    rng = rng or random.Random()
    needed = max(int(question_count or 0), len(base))
    sequence = [base[i % len(base)] for i in range(needed)]

    if shuffle:
        rng.shuffle(sequence)

    fixed = mode.fixed_direction()
    items: List[QuestionItem] = []
    for slot, word in enumerate(sequence):
        if fixed is not None:
            direction = fixed
        elif rng.random() < 0.5:
            direction = Direction.MEANING_TO_WORD
        else:
            direction = Direction.WORD_TO_MEANING
        items.append(QuestionItem(slot=slot, word=word, direction=direction))
    return items


def pick_flashcard_items(
    words: Sequence[WordRecord],
    count: int,
    *,
    rng: Optional[random.Random] = None,
) -> List[QuestionItem]:
    """Shuffle a copy of ``words`` and keep ``min(count, len(words))`` of them.

    Each card gets a random direction; no word appears twice.
    """

    rng = rng or random.Random()
    pool = list(words)
    rng.shuffle(pool)
    chosen = pool[: max(0, min(int(count or 0), len(pool)))]
    return [
        QuestionItem(
            slot=slot,
            word=word,
            direction=Direction.MEANING_TO_WORD if rng.random() < 0.5 else Direction.WORD_TO_MEANING,
        )
        for slot, word in enumerate(chosen)
    ]
