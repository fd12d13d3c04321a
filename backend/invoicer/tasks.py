from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from invoicer.core.config import settings

redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def get_redis_pool() -> ArqRedis:
    """Open an arq pool on the billing queue's Redis."""
    return await create_pool(redis_settings)


async def enqueue_task(task_name: str, *args: Any, **kwargs: Any) -> Job | None:
    """Queue ``task_name`` for the billing worker.

    Returns None when arq already holds a job with the same ``_job_id``.
    """
    pool = await get_redis_pool()
    try:
        return await pool.enqueue_job(task_name, *args, **kwargs)
    finally:
        await pool.close()


async def enqueue_bill_subscription(
    subscription_id: str, timestamp: float | None = None
) -> Job | None:
    """Enqueue invoicing of one subscription, deduplicated per subscription and timestamp."""
    job_id = f"bill:{subscription_id}:{timestamp}" if timestamp is not None else None
    return await enqueue_task(
        "bill_subscription_task", subscription_id, timestamp, _job_id=job_id
    )
