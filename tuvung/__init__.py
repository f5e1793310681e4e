"""tuvung: vocabulary courses, typed practice sessions and flashcard tests."""

__version__ = "0.4.0"
