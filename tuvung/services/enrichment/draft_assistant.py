"""Auto-suggest for the word form.

Each keystroke batch for a draft starts a new lookup generation. A lookup
checks its generation after every collaborator call and gives up as soon as
a newer one exists, so a slow reply can never overwrite fresher data.
"""

from __future__ import annotations

import base64
import logging
import re
import threading
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from tuvung.core.config import settings
from tuvung.gateway.records import MeaningInput

from .dictionary_service import DictionaryService
from .phrase_audio import PhraseAudioComposer
from .suggestion_service import SuggestionService
from .translation_service import TranslationService

logger = logging.getLogger(__name__)

VIETNAMESE_SUGGESTIONS = 3
ENGLISH_SUGGESTIONS = 2


class LookupGenerations:
    """Monotonic counter per draft id."""

    def __init__(self) -> None:
        self._current: Dict[str, int] = {}
        self._lock = threading.Lock()

    def begin(self, draft_id: str) -> int:
        with self._lock:
            generation = self._current.get(draft_id, 0) + 1
            self._current[draft_id] = generation
            return generation

    def is_current(self, draft_id: str, generation: int) -> bool:
        with self._lock:
            return self._current.get(draft_id) == generation


class DraftRefresh(BaseModel):
    draft_id: str
    generation: int
    status: Literal["applied", "superseded", "cleared"]
    text: str = ""
    suggestions: List[str] = Field(default_factory=list)
    ipa: str = ""
    audio_url: Optional[str] = None
    meaning_suggestions: List[MeaningInput] = Field(default_factory=list)
    phrase_audio_base64: Optional[str] = None
    debounce_ms: int = Field(default_factory=lambda: settings.LOOKUP_DEBOUNCE_MS)


class _Superseded(Exception):
    pass


class DraftAssistant:
    def __init__(
        self,
        generations: LookupGenerations,
        suggestions: SuggestionService,
        dictionary: DictionaryService,
        translator: TranslationService,
        composer: PhraseAudioComposer,
    ):
        self.generations = generations
        self.suggestions = suggestions
        self.dictionary = dictionary
        self.translator = translator
        self.composer = composer

    def refresh(self, draft_id: str, text: str) -> DraftRefresh:
        generation = self.generations.begin(draft_id)
        term = (text or "").strip()
        if not term:
            return DraftRefresh(draft_id=draft_id, generation=generation, status="cleared")

        def checkpoint() -> None:
            if not self.generations.is_current(draft_id, generation):
                raise _Superseded()

        try:
            suggestions = self.suggestions.suggest(term)
            checkpoint()

            entry = self.dictionary.lookup(term)
            checkpoint()

            definitions = [item.meaning for item in entry.meanings]
            translated = self.translator.translate(definitions[:VIETNAMESE_SUGGESTIONS], target="vi")
            checkpoint()

            meaning_suggestions = [
                MeaningInput(part_of_speech="vi", meaning=value) for value in translated
            ] + list(entry.meanings[:ENGLISH_SUGGESTIONS])

            phrase_audio = None
            if not entry.audio and re.search(r"[\s-]", term):
                composed = self.composer.compose(term)
                checkpoint()
                if composed:
                    phrase_audio = base64.b64encode(composed).decode("ascii")
        except _Superseded:
            logger.debug("Lookup %s for draft %s superseded", generation, draft_id)
            return DraftRefresh(draft_id=draft_id, generation=generation, status="superseded", text=term)

        return DraftRefresh(
            draft_id=draft_id,
            generation=generation,
            status="applied",
            text=term,
            suggestions=suggestions,
            ipa=entry.ipa,
            audio_url=entry.audio,
            meaning_suggestions=meaning_suggestions,
            phrase_audio_base64=phrase_audio,
        )
