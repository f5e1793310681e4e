from typing import List

from pydantic import BaseModel, Field


class DraftTextIn(BaseModel):
    text: str = ""


class TranslateIn(BaseModel):
    texts: List[str] = Field(default_factory=list)
    target: str = "vi"


class TranslateOut(BaseModel):
    translations: List[str]


class SuggestionsOut(BaseModel):
    query: str
    suggestions: List[str]
