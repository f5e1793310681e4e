from __future__ import annotations

import logging
from typing import List

from tuvung.core.config import settings
from tuvung.gateway.base import DataGateway
from tuvung.gateway.result import Err
from tuvung.gateway.storage import SupabaseStorage
from tuvung.practice.errors import PracticeError
from tuvung.schemas.catalog_schema import CourseLecturesOut, CourseOut, LectureOut
from tuvung.schemas.user_schema import CurrentUser

logger = logging.getLogger(__name__)


class CatalogService:
    """Courses and lectures to pick practice material from."""

    def __init__(self, gateway: DataGateway, storage: SupabaseStorage, user: CurrentUser):
        self.gateway = gateway
        self.storage = storage
        self.user = user

    def _value(self, result):
        if isinstance(result, Err):
            logger.error("Catalog lookup failed (%s): %s", result.code, result.reason)
            raise PracticeError("backend_unavailable", status_code=502)
        return result.value

    def list_courses(self) -> List[CourseOut]:
        courses = self._value(self.gateway.fetch_courses())
        counts = self._value(self.gateway.fetch_lecture_counts())
        return [
            CourseOut(
                course_id=course.course_id,
                name=course.name,
                description=course.description,
                creator_id=course.creator_id,
                lecture_count=counts.get(course.course_id, 0),
                is_owner=course.creator_id == self.user.id,
            )
            for course in courses
        ]

    def course_lectures(self, course_id: str) -> CourseLecturesOut:
        course = self._value(self.gateway.fetch_course(course_id))
        if course is None:
            raise PracticeError("course_not_found", status_code=404)
        lectures = self._value(self.gateway.fetch_lectures(course_id))
        return CourseLecturesOut(
            course=CourseOut(
                course_id=course.course_id,
                name=course.name,
                description=course.description,
                creator_id=course.creator_id,
                lecture_count=len(lectures),
                is_owner=course.creator_id == self.user.id,
            ),
            lectures=[
                LectureOut(
                    lecture_id=lecture.lecture_id,
                    course_id=lecture.course_id,
                    title=lecture.title,
                    order_index=lecture.order_index,
                    cover_image_url=self.storage.resolve_public_url(
                        lecture.cover_image_url, settings.LECTURE_COVER_BUCKET
                    ),
                )
                for lecture in lectures
            ],
        )
