"""Data gateway backed by the Supabase REST API (PostgREST).

Requests carry the project API key plus, when available, the caller's access
token so row level security policies apply exactly as in the browser client.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from tuvung.core.config import settings

from .base import DataGateway
from .records import (
    CourseRecord,
    LectureRecord,
    MeaningInput,
    MeaningRecord,
    WordDraft,
    WordRecord,
)
from .result import Err, GatewayResult, Ok

logger = logging.getLogger(__name__)

_WORD_COLUMNS = "word_id,lecture_id,order_in_lecture,text,image_url,ipa,audio_url"
_MEANING_COLUMNS = "meaning_id,word_id,meaning,part_of_speech,meaning_added_at"


def _in_filter(values: Iterable[str]) -> str:
    quoted = ",".join(f'"{value}"' for value in values)
    return f"in.({quoted})"


def _describe_error(response: requests.Response) -> tuple[str, str]:
    """Flatten a PostgREST error payload into ``(reason, code)``."""

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        parts = [payload.get(key) for key in ("message", "details", "hint", "code")]
        reason = " | ".join(str(part) for part in parts if part)
        code = str(payload.get("code") or response.status_code)
        return reason or response.text, code
    return response.text or f"HTTP {response.status_code}", str(response.status_code)


class SupabaseGateway(DataGateway):
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
        schema: str | None = None,
        http: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.supabase_base_url or "").rstrip("/")
        self.api_key = api_key or settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY or ""
        self.access_token = access_token
        self.schema = (schema or settings.SUPABASE_SCHEMA).strip()
        self.http = http or requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _headers(self, prefer: str | None = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        if self.schema and self.schema != "public":
            headers["Accept-Profile"] = self.schema
            headers["Content-Profile"] = self.schema
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, str] | None = None,
        payload: Any = None,
        prefer: str | None = None,
    ) -> GatewayResult[Any]:
        if not self.base_url:
            return Err("Supabase URL is not configured", code="not_configured")

        url = f"{self.base_url}/rest/v1/{path}"
        try:
            response = self.http.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self._headers(prefer),
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.error("Supabase connection error (%s %s): %s", method, path, exc)
            return Err(str(exc), code="network_error")

        if response.status_code >= 400:
            reason, code = _describe_error(response)
            logger.warning("Supabase %s %s failed (%s): %s", method, path, response.status_code, reason)
            return Err(reason, code=code)

        if response.status_code == 204 or not response.content:
            return Ok(None)
        try:
            return Ok(response.json())
        except ValueError:
            return Err("Invalid JSON payload from Supabase", code="invalid_payload")

    def _select(self, table: str, params: Dict[str, str]) -> GatewayResult[List[Dict[str, Any]]]:
        result = self._request("GET", table, params=params)
        if isinstance(result, Err):
            return result
        return Ok(list(result.value or []))

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def fetch_courses(self) -> GatewayResult[List[CourseRecord]]:
        result = self._select(
            "courses", {"select": "course_id,name,description,creator_id", "order": "name.asc"}
        )
        if isinstance(result, Err):
            return result
        return Ok([CourseRecord.model_validate(row) for row in result.value])

    def fetch_course(self, course_id: str) -> GatewayResult[Optional[CourseRecord]]:
        result = self._select(
            "courses",
            {"select": "course_id,name,description,creator_id", "course_id": f"eq.{course_id}"},
        )
        if isinstance(result, Err):
            return result
        rows = result.value
        return Ok(CourseRecord.model_validate(rows[0]) if rows else None)

    def fetch_lectures(self, course_id: str) -> GatewayResult[List[LectureRecord]]:
        result = self._select(
            "lectures",
            {
                "select": "lecture_id,course_id,title,order_index,cover_image_url",
                "course_id": f"eq.{course_id}",
                "order": "title.asc",
            },
        )
        if isinstance(result, Err):
            return result
        return Ok([LectureRecord.model_validate(row) for row in result.value])

    def fetch_lecture(self, lecture_id: str) -> GatewayResult[Optional[LectureRecord]]:
        result = self._select(
            "lectures",
            {
                "select": "lecture_id,course_id,title,order_index,cover_image_url",
                "lecture_id": f"eq.{lecture_id}",
            },
        )
        if isinstance(result, Err):
            return result
        rows = result.value
        return Ok(LectureRecord.model_validate(rows[0]) if rows else None)

    def fetch_lecture_counts(self) -> GatewayResult[Dict[str, int]]:
        result = self._select("lectures", {"select": "course_id"})
        if isinstance(result, Err):
            return result
        return Ok(dict(Counter(row["course_id"] for row in result.value)))

    # ------------------------------------------------------------------
    # Words and meanings
    # ------------------------------------------------------------------
    def fetch_words(self, lecture_id: str) -> GatewayResult[List[WordRecord]]:
        return self.fetch_words_for_lectures([lecture_id])

    def fetch_words_for_lectures(self, lecture_ids: Sequence[str]) -> GatewayResult[List[WordRecord]]:
        ids = list(lecture_ids)
        if not ids:
            return Ok([])
        result = self._select(
            "words",
            {
                "select": _WORD_COLUMNS,
                "lecture_id": _in_filter(ids),
                "order": "order_in_lecture.asc",
            },
        )
        if isinstance(result, Err):
            return result
        return Ok([WordRecord.model_validate(row) for row in result.value])

    def fetch_word(self, word_id: str) -> GatewayResult[Optional[WordRecord]]:
        result = self._select("words", {"select": _WORD_COLUMNS, "word_id": f"eq.{word_id}"})
        if isinstance(result, Err):
            return result
        rows = result.value
        return Ok(WordRecord.model_validate(rows[0]) if rows else None)

    def fetch_meanings(self, word_ids: Iterable[str]) -> GatewayResult[Dict[str, List[MeaningRecord]]]:
        ids = list(dict.fromkeys(word_ids))
        if not ids:
            return Ok({})
        result = self._select(
            "wordmeanings",
            {
                "select": _MEANING_COLUMNS,
                "word_id": _in_filter(ids),
                "order": "meaning_added_at.asc",
            },
        )
        if isinstance(result, Err):
            return result
        grouped: Dict[str, List[MeaningRecord]] = {}
        for row in result.value:
            record = MeaningRecord.model_validate(row)
            grouped.setdefault(record.word_id, []).append(record)
        return Ok(grouped)

    def next_order(self, lecture_id: str) -> GatewayResult[int]:
        result = self._select(
            "words",
            {
                "select": "order_in_lecture",
                "lecture_id": f"eq.{lecture_id}",
                "order": "order_in_lecture.desc",
                "limit": "1",
            },
        )
        if isinstance(result, Err):
            return result
        rows = result.value
        if not rows:
            return Ok(0)
        return Ok(int(rows[0].get("order_in_lecture") or 0) + 1)

    def insert_word(self, lecture_id: str, draft: WordDraft) -> GatewayResult[WordRecord]:
        payload = [{"lecture_id": lecture_id, **draft.model_dump()}]
        result = self._request(
            "POST",
            "words",
            params={"select": _WORD_COLUMNS},
            payload=payload,
            prefer="return=representation",
        )
        if isinstance(result, Err):
            return result
        rows = result.value or []
        if not rows:
            return Err("Insert returned no row", code="empty_response")
        return Ok(WordRecord.model_validate(rows[0]))

    def update_word(self, word_id: str, draft: WordDraft) -> GatewayResult[WordRecord]:
        result = self._request(
            "PATCH",
            "words",
            params={"word_id": f"eq.{word_id}", "select": _WORD_COLUMNS},
            payload=draft.model_dump(),
            prefer="return=representation",
        )
        if isinstance(result, Err):
            return result
        rows = result.value or []
        if not rows:
            return Err("Word not found", code="not_found")
        return Ok(WordRecord.model_validate(rows[0]))

    def replace_meanings(
        self, word_id: str, meanings: Sequence[MeaningInput]
    ) -> GatewayResult[List[MeaningRecord]]:
        deleted = self._request("DELETE", "wordmeanings", params={"word_id": f"eq.{word_id}"})
        if isinstance(deleted, Err):
            return deleted
        if not meanings:
            return Ok([])

        payload = [
            {
                "word_id": word_id,
                "part_of_speech": item.part_of_speech,
                "meaning": item.meaning,
                "example_sentence": None,
            }
            for item in meanings
        ]
        result = self._request(
            "POST",
            "wordmeanings",
            params={"select": _MEANING_COLUMNS},
            payload=payload,
            prefer="return=representation",
        )
        if isinstance(result, Err):
            return result
        return Ok([MeaningRecord.model_validate(row) for row in result.value or []])

    def delete_word(self, word_id: str) -> GatewayResult[None]:
        result = self._request("DELETE", "words", params={"word_id": f"eq.{word_id}"})
        if isinstance(result, Err):
            return result
        return Ok(None)

    def persist_order(self, lecture_id: str, ordered_word_ids: Sequence[str]) -> GatewayResult[None]:
        result = self._request(
            "POST",
            "rpc/reorder_words",
            payload={"p_lecture_id": lecture_id, "p_word_ids": list(ordered_word_ids)},
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    # ------------------------------------------------------------------
    # Learner notes
    # ------------------------------------------------------------------
    def record_miss(self, user_id: str, word_id: str, note_text: str) -> GatewayResult[None]:
        result = self._request(
            "POST",
            "note",
            payload=[{"user_id": user_id, "word_id": word_id, "note_text": note_text}],
            prefer="return=minimal",
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def fetch_miss_counts(self, user_id: str, word_ids: Iterable[str]) -> GatewayResult[Dict[str, int]]:
        ids = list(dict.fromkeys(word_ids))
        if not ids:
            return Ok({})
        result = self._select(
            "note",
            {"select": "word_id", "user_id": f"eq.{user_id}", "word_id": _in_filter(ids)},
        )
        if isinstance(result, Err):
            return result
        return Ok(dict(Counter(row["word_id"] for row in result.value)))
