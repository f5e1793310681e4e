"""Practice domain: question building, scoring and session state."""

from .builder import build_sequence, pick_flashcard_items
from .engine import PracticeEngine
from .errors import PracticeError, SessionNotFound
from .flashcard import FlashcardSummary, FlashcardTest
from .matching import mask_hint, strip_diacritics
from .models import (
    Direction,
    DirectionMode,
    FollowUp,
    PracticeResult,
    QuestionItem,
    SessionPhase,
    SessionState,
    SessionSummary,
    SubmitOutcome,
)
from .reorder import ReorderController, ReorderOutcome
from .repository import WordMeaningView
from .store import SessionStore

__all__ = [
    "build_sequence",
    "pick_flashcard_items",
    "PracticeEngine",
    "PracticeError",
    "SessionNotFound",
    "FlashcardSummary",
    "FlashcardTest",
    "mask_hint",
    "strip_diacritics",
    "Direction",
    "DirectionMode",
    "FollowUp",
    "PracticeResult",
    "QuestionItem",
    "SessionPhase",
    "SessionState",
    "SessionSummary",
    "SubmitOutcome",
    "ReorderController",
    "ReorderOutcome",
    "WordMeaningView",
    "SessionStore",
]
