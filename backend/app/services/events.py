"""
backend/app/services/events.py

Event emitter: pushes notification jobs to a Redis list for the
notification consumer loop (see services/notifications/consumer.py).

Emitting is fire-and-forget. If Redis is unreachable the job is lost from
the queue, but the booking row keeps notification_status=pending and the
periodic sweep picks it up later.
"""

import json
import time
import logging

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Push a notification job onto the queue.

    Returns True if the job was queued. Never raises.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(settings.notification_queue, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {settings.notification_queue}")
        return True
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
