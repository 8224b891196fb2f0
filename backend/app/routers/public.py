# backend/app/routers/public.py
"""
Public booking surface (no identity).

GET  /providers/{slug}  - provider card for the booking page
GET  /availability      - open slots for a provider and date
POST /bookings          - reserve a slot
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Providers as DBProviders
from ..schemas.bookings import BookingCreate, BookingCreated
from ..schemas.providers import ProviderRead
from ..schemas.slots import AvailabilityResponse, AvailableSlot
from ..services.errors import NotFound
from ..services.reservations import reserve
from ..services.slots import format_time, list_available, list_day, parse_date

router = APIRouter(tags=["public"])


@router.get("/providers/{slug}", response_model=ProviderRead)
def get_provider_by_slug(slug: str, db: Session = Depends(get_db)):
    provider = db.query(DBProviders).filter(DBProviders.slug == slug).first()
    if not provider:
        raise NotFound("Provider not found")
    return provider


@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
    provider_id: int,
    target_date: str = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Open slots: not blocked, not booked."""
    day = parse_date(target_date)
    slots = list_available(db, provider_id, day)
    entries = list_day(db, provider_id, day)

    return AvailabilityResponse(
        date=day.isoformat(),
        total_slots=len(entries),
        booked_slots=sum(1 for _, is_booked in entries if is_booked),
        available_slots=[
            AvailableSlot(
                id=slot.id,
                time_slot=slot.time_slot,
                formatted_time=format_time(slot.time_slot),
            )
            for slot in slots
        ],
    )


@router.post("/bookings", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, db: Session = Depends(get_db)):
    booking = reserve(
        db,
        provider_id=data.provider_id,
        date=data.date,
        time_slot=data.time_slot,
        client_name=data.client_name,
        client_phone=data.client_phone,
    )

    return BookingCreated(
        id=booking.id,
        provider_name=booking.provider.name,
        client_name=booking.client_name,
        date=booking.date,
        time_slot=booking.time_slot,
        formatted_time=format_time(booking.time_slot),
        status=booking.status,
    )
