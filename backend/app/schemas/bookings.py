# backend/app/schemas/bookings.py

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    provider_id: int
    date: str = Field(description="Date in YYYY-MM-DD format")
    time_slot: str = Field(pattern=r"^\d{2}:\d{2}$", description="Time in HH:MM format")
    client_name: str = Field(min_length=1)
    client_phone: str = Field(min_length=1)


class BookingStatusUpdate(BaseModel):
    # Unknown values reach the service and come back as invalid_transition
    status: str


class BookingRead(BaseModel):
    id: int
    provider_id: int
    date: str
    time_slot: str
    client_name: str
    client_phone: str
    status: Literal["pending", "confirmed", "completed", "cancelled"]
    notification_status: Literal["pending", "sent", "failed"]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingCreated(BaseModel):
    """Public response after a successful reservation."""
    id: int
    provider_name: str
    client_name: str
    date: str
    time_slot: str
    formatted_time: str
    status: str
