from typing import List

from fastapi import APIRouter, Depends, HTTPException

from tuvung.api.v1.dependencies import get_current_user, get_gateway, get_storage
from tuvung.gateway.base import DataGateway
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.errors import PracticeError
from tuvung.schemas.catalog_schema import CourseLecturesOut, CourseOut
from tuvung.schemas.user_schema import CurrentUser
from tuvung.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/courses", response_model=List[CourseOut])
def list_courses(
    gateway: DataGateway = Depends(get_gateway),
    storage: SupabaseStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = CatalogService(gateway=gateway, storage=storage, user=current_user)
    try:
        return service.list_courses()
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc


@router.get("/courses/{course_id}/lectures", response_model=CourseLecturesOut)
def list_course_lectures(
    course_id: str,
    gateway: DataGateway = Depends(get_gateway),
    storage: SupabaseStorage = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = CatalogService(gateway=gateway, storage=storage, user=current_user)
    try:
        return service.course_lectures(course_id)
    except PracticeError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.code) from exc
