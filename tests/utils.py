"""Utility helpers for test factories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import requests

from tuvung.gateway.records import WordRecord
from tuvung.models.course_model import Course, Lecture
from tuvung.models.word_model import Word, WordMeaning


def create_course(db, *, creator_id: str, name: str = "English 101", **kwargs) -> Course:
    course = Course(name=name, creator_id=creator_id, **kwargs)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def create_lecture(db, course: Course, *, title: str = "Lecture 1", order_index: int = 0) -> Lecture:
    lecture = Lecture(course_id=course.course_id, title=title, order_index=order_index)
    db.add(lecture)
    db.commit()
    db.refresh(lecture)
    return lecture


def create_word(
    db,
    lecture: Lecture,
    text: str,
    *,
    meanings: Sequence[str] = (),
    order: int = 0,
    ipa: Optional[str] = None,
    audio_url: Optional[str] = None,
) -> Word:
    word = Word(lecture_id=lecture.lecture_id, text=text, order_in_lecture=order, ipa=ipa, audio_url=audio_url)
    db.add(word)
    db.flush()
    base = datetime.now(timezone.utc)
    for offset, meaning in enumerate(meanings):
        db.add(
            WordMeaning(
                word_id=word.word_id,
                meaning=meaning,
                meaning_added_at=base + timedelta(seconds=offset),
            )
        )
    db.commit()
    db.refresh(word)
    return word


def word_record(word_id: str, text: Optional[str] = None, *, order: Optional[int] = 0, **kwargs) -> WordRecord:
    return WordRecord(
        word_id=word_id,
        lecture_id=kwargs.pop("lecture_id", "lecture-1"),
        text=text or word_id,
        order_in_lecture=order,
        **kwargs,
    )


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        content: Optional[bytes] = None,
        text: Optional[str] = None,
    ):
        self.status_code = status_code
        self._json = json_data
        if content is None:
            content = b"" if json_data is None else b"json"
        self.content = content
        self.text = text if text is not None else ("" if json_data is None else str(json_data))

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


Handler = Union[FakeResponse, Callable[..., FakeResponse], Exception]


class FakeHttp:
    """Stand-in for ``requests.Session`` matching routes by URL substring.

    Routes are checked most recent first; unmatched requests answer 404.
    """

    def __init__(self) -> None:
        self.routes: List[tuple[str, str, Handler]] = []
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, fragment: str, handler: Handler) -> None:
        self.routes.insert(0, (method.upper(), fragment, handler))

    def request(self, method: str, url: str, **kwargs) -> FakeResponse:
        call = {"method": method.upper(), "url": url, **kwargs}
        self.calls.append(call)
        for route_method, fragment, handler in self.routes:
            if route_method == method.upper() and fragment in url:
                if isinstance(handler, Exception):
                    raise handler
                if callable(handler) and not isinstance(handler, FakeResponse):
                    return handler(call)
                return handler
        return FakeResponse(status_code=404, text="not found")

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self.request("POST", url, **kwargs)

    def calls_to(self, fragment: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if fragment in call["url"]]


def dictionary_entry(
    word: str,
    *,
    ipa: str = "",
    audio: Optional[str] = None,
    definitions: Sequence[tuple[str, str]] = (),
) -> list:
    phonetics = []
    if ipa:
        phonetics.append({"text": ipa})
    if audio:
        phonetics.append({"audio": audio})
    meanings: Dict[str, list] = {}
    for part_of_speech, definition in definitions:
        meanings.setdefault(part_of_speech, []).append({"definition": definition})
    return [
        {
            "word": word,
            "phonetic": ipa or None,
            "phonetics": phonetics,
            "meanings": [
                {"partOfSpeech": pos, "definitions": defs} for pos, defs in meanings.items()
            ],
        }
    ]
