"""Machine translation through the public MyMemory endpoint."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import requests
from pydantic import BaseModel

from tuvung.core.config import settings

from .dictionary_service import DictionaryService

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = {"en", "vi"}


class TextTranslation(BaseModel):
    source: str
    target: str
    text: str
    translated: str
    ipa: str = ""


class TranslationService:
    def __init__(
        self,
        http: requests.Session | None = None,
        dictionary: DictionaryService | None = None,
    ):
        self.http = http or requests.Session()
        self.dictionary = dictionary or DictionaryService(http=self.http)

    def _translate_one(self, text: str, source: str, target: str) -> Optional[str]:
        try:
            response = self.http.get(
                settings.TRANSLATE_API_URL,
                params={"q": text, "langpair": f"{source}|{target}"},
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.info("Translation %s->%s failed: %s", source, target, exc)
            return None
        translated = ((payload or {}).get("responseData") or {}).get("translatedText") or ""
        return translated.strip() or None

    def translate(self, texts: Sequence[str], target: str = "vi", source: Optional[str] = None) -> List[str]:
        """Translate each text, dropping the ones that fail."""

        source = source or settings.TRANSLATE_SOURCE_LANG
        translations: List[str] = []
        for text in texts:
            cleaned = (text or "").strip()
            if not cleaned:
                continue
            translated = self._translate_one(cleaned, source, target)
            if translated:
                translations.append(translated)
        return translations

    def translate_text(self, text: str, source: str = "en", target: str = "vi") -> TextTranslation:
        """Translate free text and attach the IPA of its first English word."""

        query = (text or "").strip()
        if not query:
            return TextTranslation(source=source, target=target, text="", translated="")

        translated = self._translate_one(query, source, target) or ""
        ipa = ""
        if target == "en" and translated:
            ipa = self.dictionary.ipa_for(translated.split(" ")[0])
        elif source == "en":
            ipa = self.dictionary.ipa_for(query.split(" ")[0])
        return TextTranslation(source=source, target=target, text=query, translated=translated, ipa=ipa)
