# backend/app/services/slots/inventory.py
"""
Slot inventory: bookable (provider, date, time_slot) entries.

Occupancy is never cached here. Every read that needs to know whether a slot
is taken looks at the bookings table in the same statement.
"""

import logging
from datetime import date

from sqlalchemy import delete, exists
from sqlalchemy.orm import Session

from ...models.generated import Availability, Bookings, utcnow
from ..errors import Forbidden, InvalidDate, InvalidRange, NotFound, SlotOccupied
from .config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"


def parse_date(value: str | date) -> date:
    """Parse 'YYYY-MM-DD' into a real calendar date."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidDate(f"Invalid date: {value!r}") from None


def _active_booking_exists():
    """Correlated EXISTS: an active booking sits on the enclosing Availability row."""
    return exists().where(
        Bookings.provider_id == Availability.provider_id,
        Bookings.date == Availability.date,
        Bookings.time_slot == Availability.time_slot,
        Bookings.status != CANCELLED,
    ).correlate(Availability)


def _insert_missing(db: Session, rows: list[dict]) -> None:
    """INSERT … ON CONFLICT DO NOTHING on the (provider_id, date, time_slot) key."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise RuntimeError(f"Unsupported database dialect: {dialect}")

    stmt = insert(Availability).values(rows).on_conflict_do_nothing(
        index_elements=["provider_id", "date", "time_slot"],
    )
    db.execute(stmt)


def get_day_slots(db: Session, provider_id: int, target_date: date) -> list[Availability]:
    return (
        db.query(Availability)
        .filter(
            Availability.provider_id == provider_id,
            Availability.date == target_date.isoformat(),
        )
        .order_by(Availability.time_slot)
        .all()
    )


def generate_slots(
    db: Session,
    provider_id: int,
    target_date: str | date,
    start_hour: int,
    end_hour: int,
    config: BookingConfig | None = None,
) -> list[Availability]:
    """
    Create slots for every step in [start_hour, end_hour).

    Existing entries are left as they are, so a blocked slot stays blocked.
    Returns every slot of that day.
    """
    config = config or get_booking_config()
    target_date = parse_date(target_date)

    if not (config.min_hour <= start_hour <= config.max_hour) or not (
        config.min_hour <= end_hour <= config.max_hour
    ):
        raise InvalidRange(
            f"Hours must be between {config.min_hour} and {config.max_hour}"
        )
    if end_hour <= start_hour:
        raise InvalidRange("end_hour must be greater than start_hour")

    now = utcnow()
    rows = [
        {
            "provider_id": provider_id,
            "date": target_date.isoformat(),
            "time_slot": time_slot,
            "is_blocked": 0,
            "created_at": now,
        }
        for time_slot in config.time_slots(start_hour, end_hour)
    ]

    _insert_missing(db, rows)
    db.commit()

    logger.info(
        f"Slots generated: provider={provider_id}, date={target_date}, "
        f"hours={start_hour}-{end_hour}, ticks={len(rows)}"
    )

    return get_day_slots(db, provider_id, target_date)


def _get_owned_slot(db: Session, slot_id: int, provider_id: int) -> Availability:
    slot = db.get(Availability, slot_id)
    if not slot:
        raise NotFound("Slot not found")
    if slot.provider_id != provider_id:
        raise Forbidden("Slot belongs to another provider")
    return slot


def set_blocked(db: Session, slot_id: int, provider_id: int, blocked: bool) -> Availability:
    slot = _get_owned_slot(db, slot_id, provider_id)
    slot.is_blocked = 1 if blocked else 0
    db.commit()
    db.refresh(slot)

    logger.info(f"Slot {slot_id} {'blocked' if blocked else 'unblocked'} by provider={provider_id}")
    return slot


def delete_slot(db: Session, slot_id: int, provider_id: int) -> None:
    """Delete a slot. Refused while an active booking holds it."""
    slot = _get_owned_slot(db, slot_id, provider_id)

    label = f"{slot.date} {slot.time_slot}"
    db.expunge(slot)

    # Occupancy is checked by the DELETE itself, not by a prior read
    deleted = db.execute(
        delete(Availability.__table__).where(
            Availability.id == slot_id,
            ~_active_booking_exists(),
        )
    ).rowcount
    if not deleted:
        db.rollback()
        raise SlotOccupied()
    db.commit()

    logger.info(f"Slot {slot_id} ({label}) deleted by provider={provider_id}")


def list_available(db: Session, provider_id: int, target_date: str | date) -> list[Availability]:
    """Open slots: not blocked and not held by an active booking."""
    target_date = parse_date(target_date)
    return (
        db.query(Availability)
        .filter(
            Availability.provider_id == provider_id,
            Availability.date == target_date.isoformat(),
            Availability.is_blocked == 0,
            ~_active_booking_exists(),
        )
        .order_by(Availability.time_slot)
        .all()
    )


def list_day(db: Session, provider_id: int, target_date: str | date) -> list[tuple[Availability, bool]]:
    """Every slot of the day paired with its is_booked flag."""
    target_date = parse_date(target_date)
    rows = (
        db.query(Availability, _active_booking_exists())
        .filter(
            Availability.provider_id == provider_id,
            Availability.date == target_date.isoformat(),
        )
        .order_by(Availability.time_slot)
        .all()
    )
    return [(slot, bool(is_booked)) for slot, is_booked in rows]
