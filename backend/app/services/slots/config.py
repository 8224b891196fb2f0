# backend/app/services/slots/config.py
"""
Booking configuration for slot generation.
"""

from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the slot inventory.

    Attributes:
        slot_step_minutes: Grid step in minutes (15/30/60)
        min_hour: Earliest hour a generation request may start at
        max_hour: Latest hour a generation request may end at
    """
    slot_step_minutes: int = 30  # 15 / 30 / 60
    min_hour: int = 0
    max_hour: int = 24

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")

    def time_to_slot(self, hour: int, minute: int) -> int:
        """Convert time to slot index."""
        total_minutes = hour * 60 + minute
        return total_minutes // self.slot_step_minutes

    def slot_to_time(self, slot: int) -> tuple[int, int]:
        """Convert slot index to (hour, minute)."""
        total_minutes = slot * self.slot_step_minutes
        return total_minutes // 60, total_minutes % 60

    def format_slot_time(self, slot: int) -> str:
        """Convert slot index to time string "HH:MM"."""
        hour, minute = self.slot_to_time(slot)
        return f"{hour:02d}:{minute:02d}"

    def time_slots(self, start_hour: int, end_hour: int) -> list[str]:
        """All "HH:MM" ticks in [start_hour, end_hour)."""
        first = self.time_to_slot(start_hour, 0)
        last = self.time_to_slot(end_hour, 0)
        return [self.format_slot_time(slot) for slot in range(first, last)]


def time_str_to_minutes(time_str: str) -> int:
    """'09:30' → 570"""
    hour, minute = time_str.split(":")
    return int(hour) * 60 + int(minute)


def format_time(time_str: str) -> str:
    """'09:30' → '09:30 AM', '13:00' → '01:00 PM'."""
    minutes = time_str_to_minutes(time_str)
    hour, minute = divmod(minutes, 60)
    suffix = "AM" if hour < 12 else "PM"
    hour12 = hour % 12 or 12
    return f"{hour12:02d}:{minute:02d} {suffix}"


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get booking configuration (singleton).

    Step and hour bounds are fixed for now.
    """
    return BookingConfig()
