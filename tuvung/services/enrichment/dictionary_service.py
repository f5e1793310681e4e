"""English dictionary lookups (dictionaryapi.dev with a Datamuse fallback).

Every failure is swallowed into an empty result: enrichment only pre-fills
the word form and must never block editing.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from urllib.parse import quote

import requests
from pydantic import BaseModel, Field

from tuvung.core.config import settings
from tuvung.gateway.records import MeaningInput

from .suggestion_service import SuggestionService

logger = logging.getLogger(__name__)

TOKEN_SPLIT = re.compile(r"[\s-]+")
MAX_MEANINGS = 5
MAX_PHRASE_TOKENS = 4


def split_tokens(text: str, limit: int) -> List[str]:
    return [token for token in TOKEN_SPLIT.split(text or "") if token][:limit]


class DictionaryResult(BaseModel):
    ipa: str = ""
    audio: Optional[str] = None
    meanings: List[MeaningInput] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.ipa or self.audio or self.meanings)


class DictionaryService:
    def __init__(
        self,
        http: requests.Session | None = None,
        suggestions: SuggestionService | None = None,
    ):
        self.http = http or requests.Session()
        self.base_url = settings.DICTIONARY_API_URL.rstrip("/")
        self.suggestions = suggestions or SuggestionService(http=self.http)

    def fetch_entry(self, term: str) -> Optional[DictionaryResult]:
        """Look ``term`` up once; ``None`` when the dictionary has no entry."""

        query = (term or "").strip()
        if not query:
            return None
        try:
            response = self.http.get(
                f"{self.base_url}/{quote(query)}", timeout=settings.HTTP_TIMEOUT_SECONDS
            )
        except requests.RequestException as exc:
            logger.info("Dictionary lookup for '%s' failed: %s", query, exc)
            return None
        if not response.ok:
            return None
        try:
            data = response.json()
        except ValueError:
            return None

        entry = data[0] if isinstance(data, list) and data else None
        if not isinstance(entry, dict):
            return None

        phonetics = entry.get("phonetics") or []
        ipa = entry.get("phonetic") or next((p.get("text") for p in phonetics if p.get("text")), "") or ""
        audio = next((p.get("audio") for p in phonetics if p.get("audio")), None)
        meanings: List[MeaningInput] = []
        for block in entry.get("meanings") or []:
            for definition in block.get("definitions") or []:
                if definition.get("definition"):
                    meanings.append(
                        MeaningInput(part_of_speech=block.get("partOfSpeech"), meaning=definition["definition"])
                    )
        return DictionaryResult(ipa=ipa, audio=audio, meanings=meanings[:MAX_MEANINGS])

    def ipa_for(self, term: str) -> str:
        entry = self.fetch_entry(term)
        return entry.ipa if entry else ""

    def lookup(self, term: str) -> DictionaryResult:
        """Resolve a word or phrase, trying progressively looser strategies.

        1. the text as typed
        2. hyphenated and spaced variants
        3. a multi-word phrase token by token: IPAs joined, no audio
        4. the first Datamuse suggestion
        """

        text = (term or "").strip()
        if not text:
            return DictionaryResult()

        direct = self.fetch_entry(text)
        if direct:
            return direct

        variants = dict.fromkeys([re.sub(r"\s+", "-", text), re.sub(r"-+", " ", text)])
        for variant in variants:
            if variant == text:
                continue
            found = self.fetch_entry(variant)
            if found:
                return found

        tokens = split_tokens(text, MAX_PHRASE_TOKENS)
        if len(tokens) > 1:
            token_results = [result for result in map(self.fetch_entry, tokens) if result]
            if token_results:
                # Token audio would only pronounce the first word.
                return DictionaryResult(
                    ipa=" ".join(result.ipa for result in token_results if result.ipa),
                    audio=None,
                    meanings=[m for result in token_results for m in result.meanings][:MAX_MEANINGS],
                )

        suggested = self.suggestions.suggest(text, limit=1)
        if suggested:
            found = self.fetch_entry(suggested[0])
            if found:
                return found

        logger.debug("No dictionary entry for '%s'", text)
        return DictionaryResult()
