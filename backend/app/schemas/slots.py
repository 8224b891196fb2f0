# backend/app/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from pydantic import BaseModel, Field


class SlotGenerate(BaseModel):
    """Request to generate a day's slots."""
    date: str = Field(description="Date in YYYY-MM-DD format")
    start_hour: int
    end_hour: int


class SlotUpdate(BaseModel):
    is_blocked: bool


class SlotRead(BaseModel):
    id: int
    provider_id: int
    date: str
    time_slot: str
    is_blocked: bool

    model_config = {"from_attributes": True}


class SlotDayEntry(SlotRead):
    """Provider view: slot plus occupancy."""
    is_booked: bool = False


class SlotsDayResponse(BaseModel):
    date: str
    slots: list[SlotDayEntry]


class SlotsGenerateResponse(BaseModel):
    success: bool = True
    count: int
    slots: list[SlotRead]


class AvailableSlot(BaseModel):
    """Public view of an open slot."""
    id: int
    time_slot: str
    formatted_time: str


class AvailabilityResponse(BaseModel):
    date: str
    available_slots: list[AvailableSlot]
    total_slots: int = Field(description="All slots of the day, blocked included")
    booked_slots: int = Field(description="Slots held by an active booking")
