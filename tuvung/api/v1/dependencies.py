import logging
import re
from datetime import timedelta
from urllib.parse import unquote

from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from starlette.datastructures import State
from sqlalchemy.orm import Session
from jose import JWTError, ExpiredSignatureError

from tuvung.core import security
from tuvung.core.config import settings
from tuvung.db.session import SessionLocal
from tuvung.gateway.base import DataGateway
from tuvung.gateway.sql_gateway import SqlGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.gateway.supabase_gateway import SupabaseGateway
from tuvung.practice.engine import PracticeEngine
from tuvung.practice.flashcard import FlashcardTest
from tuvung.practice.store import SessionStore
from tuvung.schemas.user_schema import CurrentUser
from tuvung.services.enrichment import (
    DictionaryService,
    DraftAssistant,
    LookupGenerations,
    PhraseAudioComposer,
    SuggestionService,
    TranslationService,
)

log = logging.getLogger(__name__)

_session_ttl = timedelta(minutes=settings.PRACTICE_SESSION_TTL_MINUTES)
practice_sessions: SessionStore[PracticeEngine] = SessionStore(ttl=_session_ttl)
flashcard_tests: SessionStore[FlashcardTest] = SessionStore(ttl=_session_ttl)
lookup_generations = LookupGenerations()


def _get_state_container(request: Request | None) -> Optional[State]:
    if request is None:
        return None
    if getattr(request, "state", None) is None:
        request.state = State()
    return request.state


def get_db(request: Request = None) -> Generator[Session, None, None]:  # type: ignore[assignment]
    """Provide one SQLAlchemy session per request.

    Nested dependencies share the session cached on ``request.state``; a use
    counter keeps it open until the outermost dependency exits. Without a
    request (background jobs, scripts) a private session is used.
    """

    state = _get_state_container(request)
    if state is None:
        with SessionLocal() as private:
            yield private
        return

    if getattr(state, "_db_session", None) is None:
        state._db_session = SessionLocal()
        state._db_refcount = 0
    db = state._db_session
    state._db_refcount += 1

    try:
        yield db
    finally:
        state._db_refcount -= 1
        if state._db_refcount <= 0:
            del state._db_session, state._db_refcount
            db.close()


_TOKEN_PREFIX = re.compile(r"^(?:bearer|token)[\s,:]+(?P<token>.+)$", re.IGNORECASE)


def _normalize_token_value(raw_token: str | None) -> str | None:
    """Extract the bare JWT from a header, cookie or query value.

    Accepts quoted values, percent-encoded cookies (``Bearer%20…``) and a
    case-insensitive ``Bearer``/``Token`` prefix.
    """

    token = unquote((raw_token or "").strip().strip("\"'"))
    match = _TOKEN_PREFIX.match(token)
    if match:
        token = match.group("token")
    return token.strip() or None


def _decode_user_from_token(token: str | None) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    token = _normalize_token_value(token)
    if not token:
        log.warning("Token validation failed: no token supplied.")
        raise credentials_exception

    try:
        payload = security.decode_access_token(token)
    except ExpiredSignatureError:
        log.warning("Token validation failed: token expired.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")
    except JWTError:
        log.warning("Token validation failed: invalid or malformed token.")
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        log.warning("Token validation failed: no 'sub' claim.")
        raise credentials_exception

    return CurrentUser(
        id=str(user_id),
        email=payload.get("email"),
        role=payload.get("role") or "authenticated",
    )


def get_current_user(request: Request) -> CurrentUser:
    token_sources = (
        request.headers.get("Authorization"),
        request.cookies.get("access_token"),
        request.headers.get("X-Access-Token"),
        request.query_params.get("access_token"),
    )

    last_unauthorized_error: HTTPException | None = None

    for candidate in token_sources:
        token = _normalize_token_value(candidate)
        if not token:
            continue

        try:
            user = _decode_user_from_token(token)
        except HTTPException as exc:
            if exc.status_code != status.HTTP_401_UNAUTHORIZED:
                raise
            last_unauthorized_error = exc
            continue

        # Forwarded to Supabase so row level security sees the same user.
        request.state.access_token = token
        return user

    if last_unauthorized_error is not None:
        raise last_unauthorized_error

    return _decode_user_from_token(None)


def _forwarded_token(request: Request) -> str | None:
    return getattr(request.state, "access_token", None)


def get_gateway(
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> DataGateway:
    if settings.GATEWAY_BACKEND == "supabase":
        return SupabaseGateway(access_token=_forwarded_token(request))
    return SqlGateway(db)


def get_storage(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
) -> SupabaseStorage:
    return SupabaseStorage(access_token=_forwarded_token(request))


def get_practice_store() -> SessionStore[PracticeEngine]:
    return practice_sessions


def get_flashcard_store() -> SessionStore[FlashcardTest]:
    return flashcard_tests


def get_suggestion_service() -> SuggestionService:
    return SuggestionService()


def get_dictionary_service(
    suggestions: SuggestionService = Depends(get_suggestion_service),
) -> DictionaryService:
    return DictionaryService(suggestions=suggestions)


def get_translation_service(
    dictionary: DictionaryService = Depends(get_dictionary_service),
) -> TranslationService:
    return TranslationService(dictionary=dictionary)


def get_draft_assistant(
    suggestions: SuggestionService = Depends(get_suggestion_service),
    dictionary: DictionaryService = Depends(get_dictionary_service),
    translator: TranslationService = Depends(get_translation_service),
) -> DraftAssistant:
    return DraftAssistant(
        generations=lookup_generations,
        suggestions=suggestions,
        dictionary=dictionary,
        translator=translator,
        composer=PhraseAudioComposer(dictionary=dictionary),
    )
