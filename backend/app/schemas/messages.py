# backend/app/schemas/messages.py

from pydantic import BaseModel, Field

from .bookings import BookingRead


class FailedMessagesResponse(BaseModel):
    failed: list[BookingRead]
    count: int


class RetryRequest(BaseModel):
    window_hours: int = Field(24, ge=1, le=168)
    limit: int = Field(50, ge=1, le=200)


class RetryResponse(BaseModel):
    success: bool = True
    attempted: int
    succeeded: int
