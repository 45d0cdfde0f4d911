"""Run ARQ worker. Usage: python -m app.worker.run_worker (or: arq app.worker.run_worker.WorkerSettings)"""

import asyncio

from arq.worker import Worker

from app.worker.tasks import get_redis_settings, send_enrollment_email, shutdown, startup


class WorkerSettings:
    functions = [send_enrollment_email]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = get_redis_settings()
    max_tries = 1  # mail failures go to the dead-letter collection, not back on the queue


async def main():
    worker = Worker(
        functions=WorkerSettings.functions,
        redis_settings=WorkerSettings.redis_settings,
        on_startup=startup,
        on_shutdown=shutdown,
        max_tries=WorkerSettings.max_tries,
    )
    try:
        await worker.async_run()
    finally:
        await worker.close()


if __name__ == "__main__":
    asyncio.run(main())
