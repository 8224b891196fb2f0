# backend/app/routers/provider_slots.py
"""
Provider availability management.

GET    /provider/slots?date=  - day slots with occupancy
POST   /provider/slots        - generate slots for an hour range
PATCH  /provider/slots/{id}   - block / unblock
DELETE /provider/slots/{id}   - delete (refused while booked)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_provider
from ..database import get_db
from ..models.generated import Providers
from ..schemas.slots import (
    SlotDayEntry,
    SlotGenerate,
    SlotRead,
    SlotsDayResponse,
    SlotsGenerateResponse,
    SlotUpdate,
)
from ..services.slots import delete_slot, generate_slots, list_day, parse_date, set_blocked

router = APIRouter(prefix="/provider/slots", tags=["provider"])


@router.get("", response_model=SlotsDayResponse)
def get_day_slots(
    target_date: str = Query(..., alias="date"),
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    day = parse_date(target_date)
    entries = [
        SlotDayEntry(
            **SlotRead.model_validate(slot).model_dump(),
            is_booked=is_booked,
        )
        for slot, is_booked in list_day(db, provider.id, day)
    ]
    return SlotsDayResponse(date=day.isoformat(), slots=entries)


@router.post("", response_model=SlotsGenerateResponse)
def create_slots(
    data: SlotGenerate,
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    slots = generate_slots(db, provider.id, data.date, data.start_hour, data.end_hour)
    return SlotsGenerateResponse(count=len(slots), slots=slots)


@router.patch("/{slot_id}", response_model=SlotRead)
def update_slot(
    slot_id: int,
    data: SlotUpdate,
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    return set_blocked(db, slot_id, provider.id, data.is_blocked)


@router.delete("/{slot_id}")
def remove_slot(
    slot_id: int,
    provider: Providers = Depends(get_current_provider),
    db: Session = Depends(get_db),
):
    delete_slot(db, slot_id, provider.id)
    return {"success": True}
