"""Per-course progress: read the record, mark videos complete."""

from datetime import datetime
from typing import Any

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.course_progress import CourseProgress
from app.models.user import User
from app.services.courses import parse_object_id


async def get_progress(user: User, raw_course_id: Any) -> CourseProgress:
    course_id = parse_object_id(raw_course_id)
    if course_id is None:
        raise NotFoundError("Course not found")
    progress = await CourseProgress.find_one(
        CourseProgress.course_id == course_id,
        CourseProgress.user_id == user.id,
    )
    if not progress:
        raise NotFoundError("Not enrolled in this course")
    return progress


async def mark_video_completed(user: User, raw_course_id: Any, video_id: str) -> CourseProgress:
    """Idempotent: completing the same video twice keeps one entry."""
    video_id = (video_id or "").strip()
    if not video_id:
        raise BadRequestError("video_id required")
    progress = await get_progress(user, raw_course_id)
    await progress.update(
        {
            "$addToSet": {"completed_videos": video_id},
            "$set": {"updated_at": datetime.utcnow()},
        }
    )
    return progress


def progress_out(progress: CourseProgress) -> dict[str, Any]:
    return {
        "id": str(progress.id),
        "course_id": str(progress.course_id),
        "completed_videos": list(progress.completed_videos),
        "updated_at": progress.updated_at.isoformat(),
    }
