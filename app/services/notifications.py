"""Enrollment and payment emails: render templates, hand off to the mailer."""

from beanie import PydanticObjectId

from app.core.exceptions import DeclinedError
from app.core.logging import get_logger
from app.models.course import Course
from app.models.user import User
from app.services.mail_templates import (
    PAYMENT_RECEIVED_SUBJECT,
    course_enrollment_email,
    course_enrollment_subject,
    payment_success_email,
)
from app.services.mailer import get_mailer

log = get_logger(__name__)


async def send_enrollment_email(user_id: PydanticObjectId, course_id: PydanticObjectId) -> bool:
    """Confirmation for one enrollment. Runs in the worker, after the enrollment writes."""
    user = await User.get(user_id)
    course = await Course.get(course_id)
    if not user or not course:
        log.warning("enrollment_email_skipped", user_id=str(user_id), course_id=str(course_id))
        return False
    return await get_mailer().send(
        user.email,
        course_enrollment_subject(course.course_name),
        course_enrollment_email(course.course_name, user.display_name),
    )


async def send_payment_success_email(
    user: User,
    amount: int | None,
    order_id: str | None,
    payment_id: str | None,
) -> None:
    """Payment receipt; amount arrives in paise as reported by checkout."""
    if not order_id or not payment_id or not amount:
        raise DeclinedError("Please provide all the details", code="MISSING_FIELDS")
    ok = await get_mailer().send(
        user.email,
        PAYMENT_RECEIVED_SUBJECT,
        payment_success_email(user.display_name, amount / 100, order_id, payment_id),
    )
    if not ok:
        raise DeclinedError("Could not send email", code="EMAIL_FAILED")
