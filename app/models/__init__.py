from app.models.user import User
from app.models.course import Course
from app.models.course_progress import CourseProgress
from app.models.audit_log import AuditLog
from app.models.failed_job import FailedJob

__all__ = [
    "User",
    "Course",
    "CourseProgress",
    "AuditLog",
    "FailedJob",
]
