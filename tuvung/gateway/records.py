"""Typed rows exchanged with the data gateway."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CourseRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: str
    name: str
    description: Optional[str] = None
    creator_id: str


class LectureRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lecture_id: str
    course_id: str
    title: str
    order_index: int = 0
    cover_image_url: Optional[str] = None


class WordRecord(BaseModel):
    """A word as stored; ``order_in_lecture`` is unique within its lecture."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    word_id: str
    lecture_id: str
    text: str
    ipa: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    order_in_lecture: Optional[int] = None


class MeaningRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    meaning_id: Optional[str] = None
    word_id: str
    meaning: str
    part_of_speech: Optional[str] = None
    meaning_added_at: Optional[datetime] = None


class MeaningInput(BaseModel):
    meaning: str
    part_of_speech: Optional[str] = None


class WordDraft(BaseModel):
    """Column values for inserting or updating a word."""

    text: str
    ipa: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    order_in_lecture: int = Field(0, ge=0)
