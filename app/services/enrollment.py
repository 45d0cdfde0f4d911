"""
Enroll a payment-verified student in each purchased course.

Per course, in request order: add the student to the course roster, create the
(course, student) progress record, add course and progress to the student,
then queue the confirmation email. Every write is idempotent per
(course, student), so a repeated callback or a webhook racing the callback
enrolls once. A store failure on the progress or user write undoes that
course's earlier writes; courses finished earlier in the same call stay
enrolled.
"""

from dataclasses import dataclass, field
from typing import Any

from beanie import PydanticObjectId
from beanie.exceptions import DocumentNotFound
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import DeclinedError
from app.core.logging import get_logger
from app.models.course import Course
from app.models.course_progress import CourseProgress
from app.models.user import User
from app.services import courses as courses_service
from app.worker.tasks import enqueue_enrollment_email

log = get_logger(__name__)

_STORE_ERRORS = (PyMongoError, DocumentNotFound)


@dataclass
class EnrollmentResult:
    enrolled: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # already enrolled before this call


async def enroll_student(course_ids: list[Any], user_id: PydanticObjectId) -> EnrollmentResult:
    user = await User.get(user_id)
    if not user:
        raise DeclinedError("User not found", code="ENROLLMENT_FAILED")
    result = EnrollmentResult()
    for raw_id in courses_service.unique_course_ids(course_ids):
        course = await courses_service.get_course(raw_id)
        if not course:
            log.warning("enrollment_course_not_found", user_id=str(user_id), course_id=str(raw_id))
            raise DeclinedError(
                "Course not found",
                code="COURSE_NOT_FOUND",
                details={"course_id": str(raw_id), "enrolled": result.enrolled},
            )
        try:
            newly_enrolled = await _enroll_in_course(course, user)
        except _STORE_ERRORS as e:
            log.exception("enrollment_write_failed", user_id=str(user_id), course_id=str(course.id))
            raise DeclinedError(
                "Could not complete enrollment",
                code="ENROLLMENT_FAILED",
                details={"course_id": str(course.id), "enrolled": result.enrolled},
            ) from e
        if not newly_enrolled:
            log.info("enrollment_skipped", user_id=str(user_id), course_id=str(course.id))
            result.skipped.append(str(course.id))
            continue
        log.info("student_enrolled", user_id=str(user_id), course_id=str(course.id))
        result.enrolled.append(str(course.id))
        await _queue_enrollment_email(user.id, course.id)
    return result


async def _find_progress(course: Course, user: User) -> CourseProgress | None:
    return await CourseProgress.find_one(
        CourseProgress.course_id == course.id,
        CourseProgress.user_id == user.id,
    )


async def _enroll_in_course(course: Course, user: User) -> bool:
    """Apply the three writes for one course; False if the pair was already fully enrolled."""
    progress = await _find_progress(course, user)
    was_on_roster = user.id in course.students_enrolled
    if progress is not None and was_on_roster and course.id in user.courses:
        return False

    await course.update({"$addToSet": {"students_enrolled": user.id}})
    created: CourseProgress | None = None
    try:
        if progress is None:
            progress = CourseProgress(course_id=course.id, user_id=user.id, completed_videos=[])
            try:
                await progress.insert()
                created = progress
            except DuplicateKeyError:
                # a concurrent enrollment for the same pair created it first
                progress = await _find_progress(course, user)
                if progress is None:
                    raise
        await user.update({"$addToSet": {"courses": course.id, "course_progress": progress.id}})
    except _STORE_ERRORS:
        await _undo_course_writes(course, user, created, was_on_roster)
        raise
    return True


async def _undo_course_writes(
    course: Course,
    user: User,
    created: CourseProgress | None,
    was_on_roster: bool,
) -> None:
    """Compensate a half-applied enrollment; a failing undo is logged, the original error still wins."""
    try:
        if created is not None:
            await created.delete()
        if not was_on_roster:
            await course.update({"$pull": {"students_enrolled": user.id}})
    except _STORE_ERRORS:
        log.exception("enrollment_rollback_failed", user_id=str(user.id), course_id=str(course.id))
        return
    log.warning("enrollment_rolled_back", user_id=str(user.id), course_id=str(course.id))


async def _queue_enrollment_email(user_id: PydanticObjectId, course_id: PydanticObjectId) -> None:
    # enrollment is already committed; mail delivery never undoes it
    try:
        await enqueue_enrollment_email(user_id, course_id)
    except Exception as e:
        log.warning("enrollment_email_enqueue_failed", user_id=str(user_id), course_id=str(course_id), error=str(e))
