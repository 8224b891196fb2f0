# backend/app/routers/provider_bookings.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_provider
from ..database import get_db
from ..models.generated import Providers
from ..schemas.bookings import BookingRead, BookingStatusUpdate
from ..services.reservations import list_bookings, update_status

router = APIRouter(prefix="/provider/bookings", tags=["provider"])


@router.get("", response_model=list[BookingRead])
def get_bookings(
    target_date: str = Query(..., alias="date"),
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    return list_bookings(db, provider.id, target_date)


@router.patch("/{booking_id}", response_model=BookingRead)
def patch_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    return update_status(db, booking_id, provider.id, data.status)
