from dataclasses import dataclass


@dataclass(slots=True)
class PracticeError(Exception):
    """Raised when a practice or flashcard operation is not allowed."""

    code: str
    status_code: int = 400

    def __str__(self) -> str:
        return self.code


@dataclass(slots=True)
class SessionNotFound(PracticeError):
    code: str = "session_not_found"
    status_code: int = 404
