"""Explicit success/failure values returned by every gateway call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    ok: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class Err:
    """Collaborator failure (network, database, storage).

    ``reason`` is human readable, ``code`` carries the backend error code when
    one is available (PostgREST ``code``, HTTP status, SQLAlchemy class name).
    """

    reason: str
    code: str | None = None

    ok: ClassVar[bool] = False


GatewayResult = Union[Ok[T], Err]
