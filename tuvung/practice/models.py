"""Value objects of the practice engine."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tuvung.gateway.records import WordRecord


class Direction(str, Enum):
    """Which side is shown as the prompt.

    ``WORD_TO_MEANING``: the word is shown, a meaning is typed.
    ``MEANING_TO_WORD``: the primary meaning is shown, the word is typed.
    """

    WORD_TO_MEANING = "word_to_meaning"
    MEANING_TO_WORD = "meaning_to_word"


class DirectionMode(str, Enum):
    WORD_TO_MEANING = "word_to_meaning"
    MEANING_TO_WORD = "meaning_to_word"
    RANDOM = "random"

    def fixed_direction(self) -> Optional[Direction]:
        if self is DirectionMode.RANDOM:
            return None
        return Direction(self.value)


class SessionPhase(str, Enum):
    CONFIGURING = "configuring"
    ACTIVE = "active"
    REVIEWING = "reviewing"
    COMPLETED = "completed"


class QuestionItem(BaseModel):
    """One slot of the sequence; its direction never changes once built."""

    model_config = ConfigDict(frozen=True)

    slot: int
    word: WordRecord
    direction: Direction


class PracticeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    item: QuestionItem
    user_answer: str
    correct: bool
    attempts: int


class FollowUp(BaseModel):
    """Transition the client applies once ``delay_ms`` has elapsed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["advance", "complete"]
    delay_ms: int


class SessionState(BaseModel):
    phase: SessionPhase = SessionPhase.CONFIGURING
    items: List[QuestionItem] = Field(default_factory=list)
    results: List[PracticeResult] = Field(default_factory=list)
    index: int = 0
    watermark: int = 0
    attempts: int = 0
    answered: bool = False
    input_text: str = ""
    message: str = ""
    pending: Optional[FollowUp] = None
    auto_advance: bool = True

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def read_only(self) -> bool:
        return self.phase == SessionPhase.REVIEWING


class SubmitOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    accepted: bool
    correct: Optional[bool] = None
    hint: Optional[str] = None
    expected: Optional[str] = None
    result: Optional[PracticeResult] = None
    # Set when a miss is finalized; the caller records it for later review.
    missed_word_id: Optional[str] = None
    follow_up: Optional[FollowUp] = None


class ResultLine(BaseModel):
    slot: int
    word_id: str
    prompt: str
    expected: str
    user_answer: str
    correct: bool
    attempts: int


class SessionSummary(BaseModel):
    total: int
    answered: int
    correct: int
    wrong: int
    accuracy: int
    lines: List[ResultLine] = Field(default_factory=list)
