"""Course catalog: create, list, look up, enrolled courses."""

from typing import Any

from beanie import PydanticObjectId
from bson.errors import InvalidId

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.pagination import Page, paginate
from app.models.course import Course
from app.models.user import User


def parse_object_id(raw: Any) -> PydanticObjectId | None:
    """Client-supplied id -> ObjectId; None for anything malformed."""
    if isinstance(raw, PydanticObjectId):
        return raw
    try:
        return PydanticObjectId(str(raw))
    except (InvalidId, TypeError):
        return None


def unique_course_ids(raw_ids: list[Any]) -> list[str]:
    """Drop repeats, keeping first-seen order; malformed ids pass through for the lookup to reject."""
    return list(dict.fromkeys(str(parse_object_id(raw) or raw) for raw in raw_ids))


async def get_course(raw_id: Any) -> Course | None:
    course_id = parse_object_id(raw_id)
    if course_id is None:
        return None
    return await Course.get(course_id)


async def create_course(instructor: User, course_name: str, description: str, price: int) -> Course:
    course_name = (course_name or "").strip()
    if not course_name:
        raise BadRequestError("Course name required")
    if price < 0:
        raise BadRequestError("Price must not be negative")
    course = Course(
        course_name=course_name,
        description=description or "",
        price=price,
        instructor=instructor.id,
    )
    await course.insert()
    return course


async def list_courses(limit: int = 20, offset: int = 0) -> Page[Course]:
    limit, offset = paginate(limit, offset)
    query = Course.find_all()
    total = await query.count()
    items = await query.sort(-Course.created_at).skip(offset).limit(limit).to_list()
    return Page[Course](items=items, limit=limit, offset=offset, total=total)


async def get_course_or_404(raw_id: Any) -> Course:
    course = await get_course(raw_id)
    if not course:
        raise NotFoundError("Course not found")
    return course


async def list_enrolled_courses(user: User) -> list[Course]:
    if not user.courses:
        return []
    return await Course.find({"_id": {"$in": user.courses}}).to_list()


def course_summary(course: Course) -> dict[str, Any]:
    return {
        "id": str(course.id),
        "course_name": course.course_name,
        "description": course.description,
        "price": course.price,
        "instructor": str(course.instructor) if course.instructor else None,
        "students_enrolled_count": len(course.students_enrolled),
        "created_at": course.created_at.isoformat(),
    }
