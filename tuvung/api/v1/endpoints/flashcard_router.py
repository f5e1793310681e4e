from fastapi import APIRouter, Depends, HTTPException, Response, status

from tuvung.api.v1.dependencies import (
    get_current_user,
    get_flashcard_store,
    get_gateway,
    get_storage,
)
from tuvung.gateway.base import DataGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.errors import PracticeError
from tuvung.practice.flashcard import FlashcardTest
from tuvung.practice.store import SessionStore
from tuvung.schemas.flashcard_schema import FlashcardAnswerIn, FlashcardTestCreate, FlashcardTestOut
from tuvung.schemas.user_schema import CurrentUser
from tuvung.services.flashcard_service import FlashcardService

router = APIRouter()


def get_flashcard_service(
    gateway: DataGateway = Depends(get_gateway),
    store: SessionStore[FlashcardTest] = Depends(get_flashcard_store),
    storage: SupabaseStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
) -> FlashcardService:
    return FlashcardService(gateway=gateway, store=store, storage=storage, user=current_user)


@router.post("/tests", response_model=FlashcardTestOut, status_code=status.HTTP_201_CREATED)
def create_flashcard_test(
    payload: FlashcardTestCreate,
    service: FlashcardService = Depends(get_flashcard_service),
):
    try:
        return service.create_test(payload)
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.get("/tests/{test_id}", response_model=FlashcardTestOut)
def get_flashcard_test(test_id: str, service: FlashcardService = Depends(get_flashcard_service)):
    try:
        return service.get_test(test_id)
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.put("/tests/{test_id}/answer", response_model=FlashcardTestOut)
def set_flashcard_answer(
    test_id: str,
    payload: FlashcardAnswerIn,
    service: FlashcardService = Depends(get_flashcard_service),
):
    try:
        return service.set_answer(test_id, payload.answer, payload.index)
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.post("/tests/{test_id}/{action}", response_model=FlashcardTestOut)
def navigate_flashcard_test(
    test_id: str,
    action: str,
    service: FlashcardService = Depends(get_flashcard_service),
):
    handlers = {
        "previous": service.previous,
        "next": service.next,
        "flip": service.flip,
        "finish": service.finish,
    }
    handler = handlers.get(action)
    if handler is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="unknown_action")
    try:
        return handler(test_id)
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.delete("/tests/{test_id}", status_code=status.HTTP_204_NO_CONTENT)
def reset_flashcard_test(test_id: str, service: FlashcardService = Depends(get_flashcard_service)):
    if not service.reset(test_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="session_not_found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
