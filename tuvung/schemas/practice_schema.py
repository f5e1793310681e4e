from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tuvung.practice.models import (
    Direction,
    DirectionMode,
    FollowUp,
    SessionPhase,
    SessionSummary,
)


class PracticeSessionCreate(BaseModel):
    lecture_ids: List[str] = Field(..., min_length=1)
    word_ids: Optional[List[str]] = None
    question_count: int = Field(10, ge=1)
    shuffle: bool = False
    direction: DirectionMode = DirectionMode.WORD_TO_MEANING
    auto_advance: bool = True


class AnswerIn(BaseModel):
    answer: str = ""


class PromptOut(BaseModel):
    word_id: str
    direction: Direction
    text: str
    ipa: Optional[str] = None
    audio_url: Optional[str] = None
    placeholder: str


class PracticeSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    phase: SessionPhase
    index: int
    total: int
    watermark: int
    attempts: int
    answered: bool
    read_only: bool
    input_text: str
    message: str
    auto_advance: bool
    prompt: Optional[PromptOut] = None
    follow_up: Optional[FollowUp] = None
    summary: Optional[SessionSummary] = None


class AnswerOut(BaseModel):
    accepted: bool
    correct: Optional[bool] = None
    hint: Optional[str] = None
    expected: Optional[str] = None
    session: PracticeSessionOut


class MissedWordOut(BaseModel):
    word_id: str
    text: str
    lecture_id: str
    miss_count: int
