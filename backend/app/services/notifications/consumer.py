"""
Redis notification consumer loops.

- notification_consumer_loop: pops jobs from the notification queue
- retry_queue_loop: moves re-queued jobs back to the main queue

Started as asyncio tasks in backend lifespan.

Delivery failures never reach this module (the dispatcher stores them on the
booking). What gets retried here are unexpected errors, e.g. the database
being unavailable while the job runs.
"""

import asyncio
import json
import logging

import redis.asyncio as aioredis

from . import process_event

logger = logging.getLogger(__name__)

MAX_RETRIES = 3


def retry_queue_name(queue: str) -> str:
    return f"{queue}:retry"


def dead_queue_name(queue: str) -> str:
    return f"{queue}:dead"


async def notification_consumer_loop(redis_url: str, queue: str) -> None:
    """
    Consume jobs from the notification queue.

    Uses BRPOP with 5s timeout to avoid busy-waiting.
    On failure, retries up to MAX_RETRIES, then moves to dead-letter queue.
    """
    r = aioredis.from_url(redis_url, decode_responses=True)
    logger.info(f"notification_consumer_loop started on {queue}")

    try:
        while True:
            try:
                result = await r.brpop(queue, timeout=5)
                if result is None:
                    continue

                _, raw = result
                await _process_event_safe(
                    r, raw, retry_queue_name(queue), dead_queue_name(queue)
                )

            except asyncio.CancelledError:
                logger.info("notification_consumer_loop cancelled")
                raise
            except Exception:
                logger.exception("notification_consumer_loop error, retrying in 2s")
                await asyncio.sleep(2)
    finally:
        await r.aclose()


async def _process_event_safe(
    r: aioredis.Redis,
    raw: str,
    retry_queue: str,
    dead_queue: str,
) -> None:
    """
    Parse and process a single job with retry logic.

    On failure:
    - If attempts < MAX_RETRIES → push to retry queue
    - Otherwise → push to dead-letter queue
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.error(f"Invalid JSON in notification queue: {raw[:200]}")
        await r.rpush(dead_queue, raw)
        return

    attempt = data.get("_attempt", 1)

    try:
        await process_event(data)
    except Exception:
        logger.exception(
            f"Failed to process event type={data.get('type')} "
            f"(attempt {attempt}/{MAX_RETRIES})"
        )

        if attempt < MAX_RETRIES:
            data["_attempt"] = attempt + 1
            await r.rpush(retry_queue, json.dumps(data))
            logger.info(f"Event re-queued to {retry_queue} (attempt {attempt + 1})")
        else:
            await r.rpush(dead_queue, json.dumps(data))
            logger.warning(
                f"Event moved to dead-letter queue {dead_queue}: "
                f"type={data.get('type')}"
            )


async def retry_queue_loop(redis_url: str, queue: str) -> None:
    """
    Move jobs from the retry queue back to the main queue with backoff.
    """
    r = aioredis.from_url(redis_url, decode_responses=True)
    retry_q = retry_queue_name(queue)
    logger.info(f"retry_queue_loop started on {retry_q}")

    try:
        while True:
            try:
                raw = await r.lpop(retry_q)
                if raw:
                    await r.rpush(queue, raw)
                    logger.info(f"Retry: moved event from {retry_q} → {queue}")
                else:
                    await asyncio.sleep(5)

            except asyncio.CancelledError:
                logger.info("retry_queue_loop cancelled")
                raise
            except Exception:
                logger.exception("retry_queue_loop error, retrying in 5s")
                await asyncio.sleep(5)
    finally:
        await r.aclose()
