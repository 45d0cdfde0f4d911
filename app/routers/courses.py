from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.deps import get_current_user, require_instructor
from app.models.user import User
from app.services import courses as courses_service

router = APIRouter()


class CreateCourseRequest(BaseModel):
    course_name: str
    description: str = ""
    price: int = Field(ge=0)  # rupees


@router.post("")
async def create_course(body: CreateCourseRequest, user: User = Depends(require_instructor)):
    """Instructor: publish a course."""
    course = await courses_service.create_course(user, body.course_name, body.description, body.price)
    return {"success": True, "data": courses_service.course_summary(course)}


@router.get("")
async def list_courses(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Catalog, newest first."""
    page = await courses_service.list_courses(limit=limit, offset=offset)
    return {
        "items": [courses_service.course_summary(c) for c in page.items],
        "limit": page.limit,
        "offset": page.offset,
        "total": page.total,
    }


@router.get("/enrolled")
async def enrolled_courses(user: User = Depends(get_current_user)):
    courses = await courses_service.list_enrolled_courses(user)
    return {"items": [courses_service.course_summary(c) for c in courses]}


@router.get("/{course_id}")
async def get_course(course_id: str):
    course = await courses_service.get_course_or_404(course_id)
    return courses_service.course_summary(course)
