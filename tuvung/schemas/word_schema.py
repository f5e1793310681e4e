from typing import List, Optional, Union

from pydantic import BaseModel, Field

from tuvung.gateway.records import MeaningInput


class WordIn(BaseModel):
    text: str
    ipa: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    # Free text from the form; validated by the editor service.
    order_in_lecture: Optional[Union[int, str]] = None
    meanings: List[MeaningInput] = Field(default_factory=list)
    # Composed phrase audio not uploaded yet (WAV, base64).
    audio_base64: Optional[str] = None


class WordOut(BaseModel):
    word_id: str
    lecture_id: str
    text: str
    ipa: Optional[str] = None
    audio_path: Optional[str] = None
    audio_url: Optional[str] = None
    image_path: Optional[str] = None
    image_url: Optional[str] = None
    order_in_lecture: Optional[int] = None
    meanings: List[str] = Field(default_factory=list)
    meaning_summary: str = "-"


class WordListOut(BaseModel):
    lecture_id: str
    query: str = ""
    can_edit: bool
    can_reorder: bool
    total: int
    words: List[WordOut]


class ReorderIn(BaseModel):
    dragged_id: str
    target_id: str


class ReorderOut(BaseModel):
    changed: bool
    persisted: bool
    rolled_back: bool
    error: Optional[str] = None
    words: List[WordOut]


class AssetOut(BaseModel):
    bucket: str
    path: str
    public_url: Optional[str] = None
