from typing import List, Optional

from pydantic import BaseModel, Field

from tuvung.practice.flashcard import FlashcardSummary
from tuvung.practice.models import Direction


class FlashcardTestCreate(BaseModel):
    lecture_ids: List[str] = Field(..., min_length=1)
    count: int = Field(10, ge=1, le=100)


class FlashcardAnswerIn(BaseModel):
    answer: str = ""
    index: Optional[int] = Field(None, ge=0)


class FlashcardCardOut(BaseModel):
    index: int
    word_id: str
    direction: Direction
    prompt: str
    ipa: Optional[str] = None
    audio_url: Optional[str] = None
    answer: str = ""
    # Only revealed while the card is flipped.
    back: Optional[str] = None


class FlashcardTestOut(BaseModel):
    test_id: str
    index: int
    total: int
    flipped: bool
    finished: bool
    answers: List[str]
    card: Optional[FlashcardCardOut] = None
    summary: Optional[FlashcardSummary] = None
