"""
Booking domain errors.

Every error carries the HTTP status and machine code the API renders
(see the handler in app.main). Services raise them; routers don't catch them.
"""


class BookingError(Exception):
    """Base class for booking domain errors."""

    status_code = 400
    code = "booking_error"
    default_message = "Booking error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BookingError):
    code = "invalid_input"
    default_message = "Invalid input"


class InvalidPhone(InvalidInput):
    code = "invalid_phone"
    default_message = "Invalid phone number format"


class InvalidDate(InvalidInput):
    code = "invalid_date"
    default_message = "Invalid date format"


class InvalidRange(InvalidInput):
    code = "invalid_range"
    default_message = "Invalid hour range"


class InvalidTransition(BookingError):
    code = "invalid_transition"
    default_message = "Invalid status"


class Unauthorized(BookingError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(BookingError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class SlotUnavailable(BookingError):
    """Slot missing or blocked when the request was read."""

    code = "slot_unavailable"
    default_message = "This time slot is not available"


class SlotConflict(BookingError):
    """Lost the race at commit time: another booking took the slot."""

    status_code = 409
    code = "slot_conflict"
    default_message = "This time slot has just been booked. Please choose another."


class SlotOccupied(BookingError):
    status_code = 409
    code = "slot_occupied"
    default_message = "Cannot delete booked slot. Cancel appointment first."


class DeliveryFailure(BookingError):
    """Notification channel error. Recorded on the booking, never returned to clients."""

    status_code = 502
    code = "delivery_failure"
    default_message = "Message delivery failed"
