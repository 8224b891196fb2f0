"""
Reservation arbiter.

Turns an inventory slot into a booking. The one-active-booking-per-slot rule
is enforced by the uq_bookings_active_slot partial unique index: two
concurrent reservations for the same slot both pass the availability check,
both INSERT, and the database rejects the second. That rejection is
translated to SlotConflict. The INSERT is conditional on the slot row, so
a slot deleted or blocked in between yields SlotUnavailable instead.

Notifications are emitted after the commit and never awaited.
"""

import logging

from sqlalchemy import DateTime, Text, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.generated import Availability, Bookings, Providers, utcnow
from ..utils.phone_utils import clean_phone, is_valid_phone
from .errors import (
    Forbidden,
    InvalidInput,
    InvalidPhone,
    InvalidTransition,
    NotFound,
    SlotConflict,
    SlotUnavailable,
)
from .events import emit_event
from .slots.inventory import parse_date

logger = logging.getLogger(__name__)

PENDING = "pending"
CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"

BOOKING_STATUSES = (PENDING, CONFIRMED, COMPLETED, CANCELLED)

# completed and cancelled are terminal
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}


def reserve(
    db: Session,
    provider_id: int,
    date: str,
    time_slot: str,
    client_name: str,
    client_phone: str,
) -> Bookings:
    """
    Reserve a slot for a client.

    Raises:
        InvalidPhone, InvalidDate, InvalidInput: malformed request
        NotFound: provider does not exist
        SlotUnavailable: slot missing or blocked
        SlotConflict: another booking won the slot at commit time
    """
    phone = clean_phone(client_phone)
    if not is_valid_phone(phone):
        raise InvalidPhone()

    booking_date = parse_date(date)

    name = (client_name or "").strip()
    if not name:
        raise InvalidInput("Client name is required")

    provider = db.get(Providers, provider_id)
    if not provider:
        raise NotFound("Provider not found")

    slot = (
        db.query(Availability)
        .filter(
            Availability.provider_id == provider_id,
            Availability.date == booking_date.isoformat(),
            Availability.time_slot == time_slot,
        )
        .first()
    )
    if not slot:
        raise SlotUnavailable()
    if slot.is_blocked:
        raise SlotUnavailable("This time slot is currently blocked")

    # Written only if the slot is still open at write time
    now = utcnow()
    stmt = insert(Bookings.__table__).from_select(
        [
            "provider_id", "date", "time_slot", "client_name", "client_phone",
            "status", "notification_status", "created_at", "updated_at",
        ],
        select(
            Availability.provider_id,
            Availability.date,
            Availability.time_slot,
            literal(name, Text),
            literal(phone, Text),
            literal(CONFIRMED, Text),
            literal(PENDING, Text),
            literal(now, DateTime),
            literal(now, DateTime),
        ).where(
            Availability.id == slot.id,
            Availability.is_blocked == 0,
        ),
    )

    try:
        inserted = db.execute(stmt).rowcount
        if not inserted:
            db.rollback()
            raise SlotUnavailable()
        booking_id = (
            db.query(Bookings.id)
            .filter(
                Bookings.provider_id == provider_id,
                Bookings.date == booking_date.isoformat(),
                Bookings.time_slot == time_slot,
                Bookings.status != CANCELLED,
            )
            .scalar()
        )
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info(
            f"Slot conflict: provider={provider_id}, "
            f"slot={booking_date} {time_slot}, client={name!r}"
        )
        raise SlotConflict() from exc

    booking = db.get(Bookings, booking_id)

    logger.info(
        f"Booking created: booking_id={booking.id}, provider={provider_id}, "
        f"slot={booking.date} {booking.time_slot}"
    )

    emit_event("booking_created", {"booking_id": booking.id})

    return booking


def update_status(
    db: Session,
    booking_id: int,
    provider_id: int,
    new_status: str,
) -> Bookings:
    """
    Move a booking through its state machine.

    Cancelling emits a booking_cancelled notification job.
    """
    if new_status not in BOOKING_STATUSES:
        raise InvalidTransition(f"Invalid status: {new_status!r}")

    booking = db.get(Bookings, booking_id)
    if not booking:
        raise NotFound("Appointment not found")
    if booking.provider_id != provider_id:
        raise Forbidden("Appointment belongs to another provider")

    old_status = booking.status
    if new_status not in ALLOWED_TRANSITIONS.get(old_status, frozenset()):
        raise InvalidTransition(
            f"Cannot change status from {old_status} to {new_status}"
        )

    booking.status = new_status
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking_id} status: {old_status} → {new_status}")

    if new_status == CANCELLED:
        emit_event("booking_cancelled", {"booking_id": booking.id})

    return booking


def list_bookings(db: Session, provider_id: int, date: str) -> list[Bookings]:
    """All bookings of a provider for one date, any status."""
    booking_date = parse_date(date)
    return (
        db.query(Bookings)
        .filter(
            Bookings.provider_id == provider_id,
            Bookings.date == booking_date.isoformat(),
        )
        .order_by(Bookings.time_slot, Bookings.id)
        .all()
    )
