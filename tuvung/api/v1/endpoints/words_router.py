from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from tuvung.api.v1.dependencies import get_current_user, get_gateway, get_storage
from tuvung.gateway.base import DataGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.schemas.user_schema import CurrentUser
from tuvung.schemas.word_schema import (
    AssetOut,
    ReorderIn,
    ReorderOut,
    WordIn,
    WordListOut,
    WordOut,
)
from tuvung.services.word_editor_service import WordEditorError, WordEditorService

router = APIRouter()


def get_word_editor(
    gateway: DataGateway = Depends(get_gateway),
    storage: SupabaseStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
) -> WordEditorService:
    return WordEditorService(gateway=gateway, storage=storage, user=current_user)


def _raise_http(exc: WordEditorError) -> None:
    detail = exc.code if exc.status_code >= 500 or not exc.message else {"code": exc.code, "message": exc.message}
    raise HTTPException(status_code=exc.status_code, detail=detail) from exc


@router.get("/lectures/{lecture_id}/words", response_model=WordListOut)
def list_lecture_words(
    lecture_id: str,
    q: str = "",
    editor: WordEditorService = Depends(get_word_editor),
):
    try:
        return editor.list_words(lecture_id, q)
    except WordEditorError as exc:
        _raise_http(exc)


@router.post("/lectures/{lecture_id}/words", response_model=WordOut, status_code=status.HTTP_201_CREATED)
def create_word(
    lecture_id: str,
    payload: WordIn,
    editor: WordEditorService = Depends(get_word_editor),
):
    try:
        return editor.create_word(lecture_id, payload)
    except WordEditorError as exc:
        _raise_http(exc)


@router.put("/words/{word_id}", response_model=WordOut)
def update_word(
    word_id: str,
    payload: WordIn,
    editor: WordEditorService = Depends(get_word_editor),
):
    try:
        return editor.update_word(word_id, payload)
    except WordEditorError as exc:
        _raise_http(exc)


@router.delete("/words/{word_id}", response_model=WordListOut)
def delete_word(word_id: str, editor: WordEditorService = Depends(get_word_editor)):
    try:
        return editor.delete_word(word_id)
    except WordEditorError as exc:
        _raise_http(exc)


@router.post("/lectures/{lecture_id}/words/reorder", response_model=ReorderOut)
def reorder_words(
    lecture_id: str,
    payload: ReorderIn,
    q: str = "",
    editor: WordEditorService = Depends(get_word_editor),
):
    try:
        return editor.reorder(lecture_id, payload.dragged_id, payload.target_id, query=q)
    except WordEditorError as exc:
        _raise_http(exc)


@router.post("/assets/{bucket}", response_model=AssetOut, status_code=status.HTTP_201_CREATED)
def upload_asset(
    bucket: str,
    file: UploadFile = File(...),
    editor: WordEditorService = Depends(get_word_editor),
):
    data = file.file.read()
    try:
        return editor.upload_asset(bucket, file.filename or "", data, file.content_type)
    except WordEditorError as exc:
        _raise_http(exc)
