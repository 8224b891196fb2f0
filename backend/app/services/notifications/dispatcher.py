"""
Notification dispatcher.

Delivers booking confirmations and cancellations through a MessageService and
records the outcome on the booking (notification_status). Delivery failures
are stored, not raised: the reservation that triggered the message has already
succeeded and must not learn about channel outages.

The dispatcher opens its own DB sessions. It runs in background tasks, long
after the request session that created the booking is closed. Uses synchronous
DB (via asyncio.to_thread).
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...database import SessionLocal
from ...models.generated import Bookings, utcnow
from ...utils.phone_utils import normalize_phone
from .channels import MessageService, get_message_service
from .formatters import format_cancellation, format_confirmation

logger = logging.getLogger(__name__)

PENDING = "pending"
SENT = "sent"
FAILED = "failed"

CANCELLED = "cancelled"

WHATSAPP = "whatsapp"
SMS = "sms"


@dataclass
class RetryResult:
    attempted: int = 0
    succeeded: int = 0

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded


class NotificationDispatcher:
    """
    Sends booking messages and tracks notification_status.

    Database work runs in worker threads (asyncio.to_thread); only the channel
    call is awaited on the event loop.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        message_service: MessageService,
    ):
        self.session_factory = session_factory
        self.message_service = message_service

    async def send_booking_confirmation(self, booking_id: int) -> bool:
        """
        Send the confirmation for a booking.

        notification_status goes to pending before the send, then to sent or
        failed. A crash mid-send therefore leaves the row pending, never sent.

        Returns True if the message was delivered.
        """
        outgoing = await asyncio.to_thread(self._prepare_confirmation, booking_id)
        if outgoing is None:
            logger.error(f"Booking {booking_id} not found, confirmation skipped")
            return False

        channel, to, message = outgoing
        try:
            if channel == WHATSAPP:
                await self.message_service.send_whatsapp(to, message)
            else:
                await self.message_service.send_sms(to, message)
        except Exception as e:
            logger.warning(f"Failed to send confirmation for booking {booking_id}: {e}")
            await asyncio.to_thread(self._record_outcome, booking_id, FAILED)
            return False

        await asyncio.to_thread(self._record_outcome, booking_id, SENT)
        logger.info(f"Confirmation sent for booking {booking_id} via {channel}")
        return True

    async def send_cancellation_notification(self, booking_id: int) -> bool:
        """Send the cancellation notice by SMS. notification_status is untouched."""
        outgoing = await asyncio.to_thread(self._prepare_cancellation, booking_id)
        if outgoing is None:
            logger.error(f"Booking {booking_id} not found, cancellation notice skipped")
            return False

        to, message = outgoing
        try:
            await self.message_service.send_sms(to, message)
        except Exception as e:
            logger.warning(f"Failed to send cancellation for booking {booking_id}: {e}")
            return False

        logger.info(f"Cancellation notice sent for booking {booking_id}")
        return True

    async def retry_failed(
        self,
        provider_id: Optional[int] = None,
        window_hours: int = 24,
        limit: int = 50,
    ) -> RetryResult:
        """
        Re-send confirmations that ended as failed within the last window_hours.

        Cancelled bookings are skipped. Oldest first, at most `limit`, one at
        a time. One bad item never stops the batch.
        """
        since = utcnow() - timedelta(hours=window_hours)
        booking_ids = await asyncio.to_thread(
            self._select_ids, FAILED, Bookings.created_at >= since, provider_id, limit
        )

        result = await self._resend(booking_ids)

        logger.info(
            f"Retry batch done: provider={provider_id}, "
            f"attempted={result.attempted}, succeeded={result.succeeded}"
        )
        return result

    async def sweep_stale_pending(self, older_than_minutes: int = 10, limit: int = 50) -> RetryResult:
        """
        Re-dispatch confirmations stuck in pending.

        Covers jobs that never reached the queue (Redis down at emit time) and
        workers that died mid-send.
        """
        cutoff = utcnow() - timedelta(minutes=older_than_minutes)
        booking_ids = await asyncio.to_thread(
            self._select_ids, PENDING, Bookings.created_at <= cutoff, None, limit
        )

        if booking_ids:
            logger.info(f"Stale pending confirmations found: {len(booking_ids)}")

        return await self._resend(booking_ids)

    async def _resend(self, booking_ids: list[int]) -> RetryResult:
        result = RetryResult()
        for booking_id in booking_ids:
            result.attempted += 1
            try:
                if await self.send_booking_confirmation(booking_id):
                    result.succeeded += 1
            except Exception:
                logger.exception(f"Retry failed for booking {booking_id}")
        return result

    # Sync DB sections, run via asyncio.to_thread

    def _prepare_confirmation(self, booking_id: int) -> Optional[tuple[str, str, str]]:
        """Mark the booking pending and build (channel, to, message)."""
        db = self.session_factory()
        try:
            booking = db.get(Bookings, booking_id)
            if not booking:
                return None

            booking.notification_status = PENDING
            db.commit()

            provider = booking.provider
            # WhatsApp when the provider has a WhatsApp sender, SMS otherwise
            channel = WHATSAPP if provider.whatsapp_number else SMS
            return channel, normalize_phone(booking.client_phone), format_confirmation(booking, provider)
        finally:
            db.close()

    def _prepare_cancellation(self, booking_id: int) -> Optional[tuple[str, str]]:
        db = self.session_factory()
        try:
            booking = db.get(Bookings, booking_id)
            if not booking:
                return None
            return normalize_phone(booking.client_phone), format_cancellation(booking, booking.provider)
        finally:
            db.close()

    def _record_outcome(self, booking_id: int, notification_status: str) -> None:
        db = self.session_factory()
        try:
            db.query(Bookings).filter(Bookings.id == booking_id).update(
                {"notification_status": notification_status, "updated_at": utcnow()},
                synchronize_session=False,
            )
            db.commit()
        finally:
            db.close()

    def _select_ids(
        self,
        notification_status: str,
        age_filter,
        provider_id: Optional[int],
        limit: int,
    ) -> list[int]:
        """Oldest first: non-cancelled bookings in the given notification state."""
        db = self.session_factory()
        try:
            query = db.query(Bookings.id).filter(
                Bookings.notification_status == notification_status,
                Bookings.status != CANCELLED,
                age_filter,
            )
            if provider_id is not None:
                query = query.filter(Bookings.provider_id == provider_id)
            rows = query.order_by(Bookings.created_at, Bookings.id).limit(limit)
            return [row.id for row in rows]
        finally:
            db.close()


def list_failed(db: Session, provider_id: int, limit: int = 20) -> list[Bookings]:
    """Most recent failed confirmations of a provider."""
    return (
        db.query(Bookings)
        .filter(
            Bookings.provider_id == provider_id,
            Bookings.notification_status == FAILED,
        )
        .order_by(Bookings.created_at.desc(), Bookings.id.desc())
        .limit(limit)
        .all()
    )


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher (also a FastAPI dependency)."""
    return NotificationDispatcher(SessionLocal, get_message_service())
