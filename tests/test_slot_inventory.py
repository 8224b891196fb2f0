import pytest

from backend.app.services.errors import Forbidden, InvalidDate, InvalidRange, NotFound, SlotOccupied
from backend.app.services.reservations import reserve, update_status
from backend.app.services.slots import (
    BookingConfig,
    delete_slot,
    format_time,
    generate_slots,
    list_available,
    list_day,
    set_blocked,
)

DAY = "2025-06-02"


def _labels(slots):
    return [slot.time_slot for slot in slots]


def test_generate_slots_half_hour_cadence(db, provider):
    slots = generate_slots(db, provider.id, DAY, 9, 11)

    assert _labels(slots) == ["09:00", "09:30", "10:00", "10:30"]
    assert all(not slot.is_blocked for slot in slots)
    assert {slot.date for slot in slots} == {DAY}


def test_generate_slots_is_idempotent_and_keeps_blocked(db, provider):
    first = generate_slots(db, provider.id, DAY, 9, 17)
    blocked_id = first[3].id
    set_blocked(db, blocked_id, provider.id, True)

    second = generate_slots(db, provider.id, DAY, 9, 17)

    assert [(s.id, s.time_slot) for s in second] == [(s.id, s.time_slot) for s in first]
    assert len(second) == 16
    assert [s.id for s in second if s.is_blocked] == [blocked_id]


def test_generate_overlapping_ranges_extends_the_day(db, provider):
    generate_slots(db, provider.id, DAY, 9, 11)
    slots = generate_slots(db, provider.id, DAY, 10, 12)

    assert _labels(slots) == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]


@pytest.mark.parametrize("start, end", [(11, 9), (9, 9), (-1, 5), (20, 25)])
def test_generate_slots_rejects_bad_ranges(db, provider, start, end):
    with pytest.raises(InvalidRange):
        generate_slots(db, provider.id, DAY, start, end)


def test_generate_slots_full_day(db, provider):
    slots = generate_slots(db, provider.id, DAY, 0, 24)

    assert len(slots) == 48
    assert slots[0].time_slot == "00:00"
    assert slots[-1].time_slot == "23:30"


@pytest.mark.parametrize("value", ["2025-02-30", "02/06/2025", "tomorrow", ""])
def test_generate_slots_rejects_bad_dates(db, provider, value):
    with pytest.raises(InvalidDate):
        generate_slots(db, provider.id, value, 9, 11)


def test_set_blocked_ownership(db, provider, other_provider):
    slot = generate_slots(db, provider.id, DAY, 9, 10)[0]

    with pytest.raises(NotFound):
        set_blocked(db, 9999, provider.id, True)
    with pytest.raises(Forbidden):
        set_blocked(db, slot.id, other_provider.id, True)

    assert set_blocked(db, slot.id, provider.id, True).is_blocked
    assert not set_blocked(db, slot.id, provider.id, False).is_blocked


def test_list_available_hides_blocked_and_booked(db, provider):
    slots = generate_slots(db, provider.id, DAY, 9, 11)
    set_blocked(db, slots[1].id, provider.id, True)
    reserve(db, provider.id, DAY, "10:00", "Alice", "0911111111")

    assert _labels(list_available(db, provider.id, DAY)) == ["09:00", "10:30"]


def test_cancelled_booking_frees_the_slot(db, provider):
    generate_slots(db, provider.id, DAY, 9, 10)
    booking = reserve(db, provider.id, DAY, "09:00", "Alice", "0911111111")
    assert _labels(list_available(db, provider.id, DAY)) == ["09:30"]

    update_status(db, booking.id, provider.id, "cancelled")

    assert _labels(list_available(db, provider.id, DAY)) == ["09:00", "09:30"]


def test_list_available_is_scoped_to_provider_and_date(db, provider, other_provider):
    generate_slots(db, provider.id, DAY, 9, 10)
    generate_slots(db, other_provider.id, DAY, 14, 15)
    generate_slots(db, provider.id, "2025-06-03", 12, 13)

    assert _labels(list_available(db, provider.id, DAY)) == ["09:00", "09:30"]
    assert _labels(list_available(db, other_provider.id, DAY)) == ["14:00", "14:30"]


def test_list_day_annotates_occupancy(db, provider):
    generate_slots(db, provider.id, DAY, 9, 10)
    reserve(db, provider.id, DAY, "09:30", "Alice", "0911111111")

    day = [(slot.time_slot, is_booked) for slot, is_booked in list_day(db, provider.id, DAY)]

    assert day == [("09:00", False), ("09:30", True)]


def test_delete_guard(db, provider, other_provider):
    slot = generate_slots(db, provider.id, DAY, 9, 10)[0]
    slot_id = slot.id
    booking = reserve(db, provider.id, DAY, "09:00", "Alice", "0911111111")

    with pytest.raises(Forbidden):
        delete_slot(db, slot_id, other_provider.id)
    with pytest.raises(SlotOccupied):
        delete_slot(db, slot_id, provider.id)

    update_status(db, booking.id, provider.id, "cancelled")
    delete_slot(db, slot_id, provider.id)

    assert _labels(entry for entry, _ in list_day(db, provider.id, DAY)) == ["09:30"]
    with pytest.raises(NotFound):
        delete_slot(db, slot_id, provider.id)


def test_deleting_a_slot_keeps_booking_history(db, provider):
    slot = generate_slots(db, provider.id, DAY, 9, 10)[0]
    booking = reserve(db, provider.id, DAY, "09:00", "Alice", "0911111111")
    update_status(db, booking.id, provider.id, "cancelled")

    delete_slot(db, slot.id, provider.id)

    db.expire_all()
    assert booking.status == "cancelled"


def test_booking_config_time_slots():
    assert BookingConfig().time_slots(9, 10) == ["09:00", "09:30"]
    assert BookingConfig(slot_step_minutes=15).time_slots(9, 10) == ["09:00", "09:15", "09:30", "09:45"]
    with pytest.raises(ValueError):
        BookingConfig(slot_step_minutes=20)


@pytest.mark.parametrize("label, expected", [
    ("00:00", "12:00 AM"),
    ("09:30", "09:30 AM"),
    ("12:00", "12:00 PM"),
    ("17:30", "05:30 PM"),
])
def test_format_time(label, expected):
    assert format_time(label) == expected
