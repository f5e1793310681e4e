from typing import Callable, List, TypeVar

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from tuvung.api.v1.dependencies import (
    get_current_user,
    get_gateway,
    get_practice_store,
    get_storage,
)
from tuvung.gateway.base import DataGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.engine import PracticeEngine
from tuvung.practice.errors import PracticeError
from tuvung.practice.store import SessionStore
from tuvung.schemas.practice_schema import (
    AnswerIn,
    AnswerOut,
    MissedWordOut,
    PracticeSessionCreate,
    PracticeSessionOut,
)
from tuvung.schemas.user_schema import CurrentUser
from tuvung.services.practice_service import PracticeService

router = APIRouter()

T = TypeVar("T")


def get_practice_service(
    gateway: DataGateway = Depends(get_gateway),
    store: SessionStore[PracticeEngine] = Depends(get_practice_store),
    storage: SupabaseStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
) -> PracticeService:
    return PracticeService(gateway=gateway, store=store, storage=storage, user=current_user)


def _call(operation: Callable[[], T]) -> T:
    try:
        return operation()
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.post("/sessions", response_model=PracticeSessionOut, status_code=status.HTTP_201_CREATED)
def start_practice_session(
    payload: PracticeSessionCreate,
    service: PracticeService = Depends(get_practice_service),
):
    return _call(lambda: service.start_session(payload))


@router.get("/sessions/{session_id}", response_model=PracticeSessionOut)
def get_practice_session(session_id: str, service: PracticeService = Depends(get_practice_service)):
    return _call(lambda: service.get_session(session_id))


@router.post("/sessions/{session_id}/answer", response_model=AnswerOut)
def submit_answer(
    session_id: str,
    payload: AnswerIn,
    background_tasks: BackgroundTasks,
    service: PracticeService = Depends(get_practice_service),
):
    return _call(lambda: service.submit(session_id, payload.answer, background_tasks))


@router.post("/sessions/{session_id}/advance", response_model=PracticeSessionOut)
def advance_session(session_id: str, service: PracticeService = Depends(get_practice_service)):
    return _call(lambda: service.advance(session_id))


@router.post("/sessions/{session_id}/back", response_model=PracticeSessionOut)
def go_back(session_id: str, service: PracticeService = Depends(get_practice_service)):
    return _call(lambda: service.back(session_id))


@router.post("/sessions/{session_id}/restart", response_model=PracticeSessionOut)
def restart_session(session_id: str, service: PracticeService = Depends(get_practice_service)):
    return _call(lambda: service.restart(session_id))


@router.get("/missed-words", response_model=List[MissedWordOut])
def list_missed_words(
    lecture_ids: List[str] = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    service: PracticeService = Depends(get_practice_service),
):
    return _call(lambda: service.top_missed_words(lecture_ids, limit=limit))
