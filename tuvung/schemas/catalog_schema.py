from typing import List, Optional

from pydantic import BaseModel


class CourseOut(BaseModel):
    course_id: str
    name: str
    description: Optional[str] = None
    creator_id: str
    lecture_count: int = 0
    is_owner: bool = False


class LectureOut(BaseModel):
    lecture_id: str
    course_id: str
    title: str
    order_index: int = 0
    cover_image_url: Optional[str] = None


class CourseLecturesOut(BaseModel):
    course: CourseOut
    lectures: List[LectureOut]
