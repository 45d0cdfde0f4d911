"""ARQ job definitions."""

import uuid
from typing import Any

from arq import create_pool
from arq.connections import RedisSettings
from beanie import PydanticObjectId

from app.core.config import get_settings
from app.core.logging import bind_job, get_logger
from app.services import notifications

log = get_logger(__name__)


class NotificationNotDelivered(Exception):
    pass


async def _run_with_dlq(
    job_name: str,
    job_id: str | None,
    args: list[Any],
    kwargs: dict[str, Any],
    coro,
) -> None:
    """Run coroutine; on exception persist to FailedJob then re-raise."""
    try:
        await coro
    except Exception as e:
        from app.models.failed_job import FailedJob
        fid = job_id or str(uuid.uuid4())
        await FailedJob(
            job_name=job_name,
            job_id=fid,
            args=args,
            kwargs=kwargs,
            reason=str(e)[:2000],
        ).insert()
        log.exception("job_failed", reason=str(e))
        raise


async def send_enrollment_email(ctx: dict[str, Any], user_id: str, course_id: str) -> None:
    """Send the enrollment confirmation for one (user, course) pair. Not retried."""
    job_id = ctx.get("job_id") if isinstance(ctx.get("job_id"), str) else None
    bind_job("send_enrollment_email", job_id)

    async def _run() -> None:
        log.info("job_start", user_id=user_id, course_id=course_id)
        delivered = await notifications.send_enrollment_email(
            PydanticObjectId(user_id),
            PydanticObjectId(course_id),
        )
        if not delivered:
            raise NotificationNotDelivered(f"enrollment email for course {course_id} not delivered")
        log.info("job_done", user_id=user_id, course_id=course_id)

    await _run_with_dlq("send_enrollment_email", job_id, [user_id, course_id], {}, _run())


async def startup(ctx: dict) -> None:
    from app.core.logging import configure_logging
    from app.db.init import init_db
    configure_logging(debug=get_settings().debug)
    await init_db()


async def shutdown(ctx: dict) -> None:
    pass


def get_redis_settings() -> RedisSettings:
    return RedisSettings.from_dsn(get_settings().redis_url)


async def enqueue_enrollment_email(user_id: PydanticObjectId, course_id: PydanticObjectId) -> None:
    """Enqueue send_enrollment_email (call from the API once enrollment writes are done)."""
    redis = await create_pool(get_redis_settings())
    try:
        await redis.enqueue_job("send_enrollment_email", str(user_id), str(course_id))
    finally:
        await redis.aclose()
