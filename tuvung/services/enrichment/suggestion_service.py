from __future__ import annotations

import logging
from typing import List

import requests

from tuvung.core.config import settings

logger = logging.getLogger(__name__)


class SuggestionService:
    """Spelling completions from Datamuse ``/sug``."""

    def __init__(self, http: requests.Session | None = None):
        self.http = http or requests.Session()
        self.base_url = settings.DATAMUSE_API_URL.rstrip("/")

    def suggest(self, prefix: str, limit: int = 5) -> List[str]:
        text = (prefix or "").strip()
        if not text:
            return []
        try:
            response = self.http.get(
                f"{self.base_url}/sug", params={"s": text}, timeout=settings.HTTP_TIMEOUT_SECONDS
            )
            response.raise_for_status()
            rows = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.info("Datamuse suggestions for '%s' failed: %s", text, exc)
            return []
        if not isinstance(rows, list):
            return []
        return [row["word"] for row in rows if isinstance(row, dict) and row.get("word")][:limit]
