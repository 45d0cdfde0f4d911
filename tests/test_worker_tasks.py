from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from beanie import PydanticObjectId

from app.worker.tasks import NotificationNotDelivered, send_enrollment_email

pytestmark = pytest.mark.asyncio


async def test_delivered_email_does_not_dead_letter():
    failed_job = MagicMock()
    with patch("app.services.notifications.send_enrollment_email", AsyncMock(return_value=True)), \
            patch("app.models.failed_job.FailedJob", failed_job):
        await send_enrollment_email({"job_id": "job-1"}, str(PydanticObjectId()), str(PydanticObjectId()))
    failed_job.assert_not_called()


async def test_undelivered_email_is_dead_lettered_and_raised():
    user_id, course_id = str(PydanticObjectId()), str(PydanticObjectId())
    failed_doc = MagicMock()
    failed_doc.insert = AsyncMock()
    failed_job = MagicMock(return_value=failed_doc)

    with patch("app.services.notifications.send_enrollment_email", AsyncMock(return_value=False)), \
            patch("app.models.failed_job.FailedJob", failed_job):
        with pytest.raises(NotificationNotDelivered):
            await send_enrollment_email({"job_id": "job-2"}, user_id, course_id)

    kwargs = failed_job.call_args.kwargs
    assert kwargs["job_name"] == "send_enrollment_email"
    assert kwargs["job_id"] == "job-2"
    assert kwargs["args"] == [user_id, course_id]
    failed_doc.insert.assert_awaited_once()


async def test_enqueue_closes_pool():
    from app.worker import tasks

    pool = MagicMock()
    pool.enqueue_job = AsyncMock()
    pool.aclose = AsyncMock()
    user_id, course_id = PydanticObjectId(), PydanticObjectId()

    with patch("app.worker.tasks.create_pool", AsyncMock(return_value=pool)):
        await tasks.enqueue_enrollment_email(user_id, course_id)

    pool.enqueue_job.assert_awaited_once_with("send_enrollment_email", str(user_id), str(course_id))
    pool.aclose.assert_awaited_once()
