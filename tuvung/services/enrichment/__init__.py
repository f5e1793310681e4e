"""Best-effort helpers that pre-fill the word form."""

from .dictionary_service import DictionaryResult, DictionaryService
from .draft_assistant import DraftAssistant, DraftRefresh, LookupGenerations
from .phrase_audio import PhraseAudioComposer
from .suggestion_service import SuggestionService
from .translation_service import TextTranslation, TranslationService

__all__ = [
    "DictionaryResult",
    "DictionaryService",
    "DraftAssistant",
    "DraftRefresh",
    "LookupGenerations",
    "PhraseAudioComposer",
    "SuggestionService",
    "TextTranslation",
    "TranslationService",
]
