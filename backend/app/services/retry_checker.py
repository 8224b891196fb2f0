"""
Failed notification retry checker.

Periodically re-sends confirmations that failed within the retry window and
re-dispatches confirmations stuck in pending (lost queue job or a worker that
died mid-send).

Runs as an asyncio task in backend lifespan.
"""

import asyncio
import logging

from ..config import settings
from .notifications.dispatcher import NotificationDispatcher, get_dispatcher

logger = logging.getLogger(__name__)


async def retry_checker_loop(dispatcher: NotificationDispatcher | None = None) -> None:
    """
    Periodic loop: retry_failed + sweep_stale_pending every
    settings.retry_interval_seconds.
    """
    dispatcher = dispatcher or get_dispatcher()
    interval = settings.retry_interval_seconds
    logger.info(f"retry_checker_loop started (every {interval}s)")

    try:
        while True:
            await asyncio.sleep(interval)
            try:
                await run_retry_pass(dispatcher)
            except asyncio.CancelledError:
                logger.info("retry_checker_loop cancelled")
                raise
            except Exception:
                logger.exception("retry_checker_loop error")
    except asyncio.CancelledError:
        pass


async def run_retry_pass(dispatcher: NotificationDispatcher) -> None:
    """One pass over failed and stale-pending confirmations, all providers."""
    failed = await dispatcher.retry_failed(
        window_hours=settings.retry_window_hours,
        limit=settings.retry_limit,
    )
    stale = await dispatcher.sweep_stale_pending(
        older_than_minutes=settings.stale_pending_minutes,
        limit=settings.retry_limit,
    )

    if failed.attempted or stale.attempted:
        logger.info(
            f"Retry pass: failed {failed.succeeded}/{failed.attempted} sent, "
            f"stale pending {stale.succeeded}/{stale.attempted} sent"
        )
