import asyncio
import json
from datetime import timedelta

import pytest

from backend.app.models.generated import Bookings, utcnow
from backend.app.services import notifications
from backend.app.services.notifications import EVENT_HANDLERS, process_event
from backend.app.services.notifications import dispatcher as dispatcher_module
from backend.app.services.notifications.consumer import (
    MAX_RETRIES,
    _process_event_safe,
    dead_queue_name,
    retry_queue_name,
)
from backend.app.services.retry_checker import run_retry_pass
from backend.app.services.reservations import reserve
from backend.app.services.slots import generate_slots

QUEUE = "notifications:queue"
RETRY = retry_queue_name(QUEUE)
DEAD = dead_queue_name(QUEUE)


class FakeAsyncRedis:
    def __init__(self):
        self.lists: dict[str, list[str]] = {}

    async def rpush(self, name, value):
        self.lists.setdefault(name, []).append(value)
        return len(self.lists[name])

    def pushed(self, name) -> list[dict]:
        return [json.loads(raw) for raw in self.lists.get(name, [])]


@pytest.fixture
def fake_redis():
    return FakeAsyncRedis()


@pytest.fixture
def use_dispatcher(monkeypatch, dispatcher):
    monkeypatch.setattr(dispatcher_module, "get_dispatcher", lambda: dispatcher)
    return dispatcher


def test_queue_names():
    assert RETRY == "notifications:queue:retry"
    assert DEAD == "notifications:queue:dead"


def test_booking_events_are_registered():
    assert {"booking_created", "booking_cancelled"} <= set(EVENT_HANDLERS)


def test_booking_created_job_sends_confirmation(db, provider, queue, use_dispatcher, channel):
    generate_slots(db, provider.id, "2025-06-02", 9, 10)
    booking = reserve(db, provider.id, "2025-06-02", "09:00", "Alice", "0911111111")

    asyncio.run(process_event(queue.events[0]))

    assert [kind for kind, _, _ in channel.sent] == ["sms"]
    db.expire_all()
    assert booking.notification_status == "sent"


def test_booking_cancelled_job_sends_notice(db, provider, use_dispatcher, channel):
    generate_slots(db, provider.id, "2025-06-02", 9, 10)
    booking = reserve(db, provider.id, "2025-06-02", "09:00", "Alice", "0911111111")

    asyncio.run(process_event({"type": "booking_cancelled", "booking_id": booking.id}))

    [(kind, _, body)] = channel.sent
    assert kind == "sms"
    assert "Appointment Cancelled" in body


def test_unknown_or_untyped_events_are_ignored(use_dispatcher, channel):
    asyncio.run(process_event({"type": "something_else"}))
    asyncio.run(process_event({"booking_id": 1}))
    asyncio.run(process_event({"type": "booking_created"}))

    assert channel.attempts == 0


def test_invalid_json_goes_to_dead_letter(fake_redis):
    asyncio.run(_process_event_safe(fake_redis, "{not json", RETRY, DEAD))

    assert fake_redis.lists == {DEAD: ["{not json"]}


def test_successful_job_is_not_requeued(fake_redis, monkeypatch):
    seen = []

    async def handler(data):
        seen.append(data)

    monkeypatch.setitem(EVENT_HANDLERS, "test_event", handler)

    asyncio.run(_process_event_safe(fake_redis, json.dumps({"type": "test_event"}), RETRY, DEAD))

    assert seen == [{"type": "test_event"}]
    assert fake_redis.lists == {}


def test_failing_job_is_retried_then_dead_lettered(fake_redis, monkeypatch):
    async def handler(data):
        raise RuntimeError("database unavailable")

    monkeypatch.setitem(EVENT_HANDLERS, "test_event", handler)

    raw = json.dumps({"type": "test_event", "booking_id": 7})
    for _ in range(MAX_RETRIES):
        asyncio.run(_process_event_safe(fake_redis, raw, RETRY, DEAD))
        if fake_redis.lists.get(RETRY):
            raw = fake_redis.lists[RETRY].pop(0)

    assert fake_redis.lists[RETRY] == []
    [dead] = fake_redis.pushed(DEAD)
    assert dead["booking_id"] == 7
    assert dead["_attempt"] == MAX_RETRIES


def test_retry_attempt_counter(fake_redis, monkeypatch):
    async def handler(data):
        raise RuntimeError("boom")

    monkeypatch.setitem(EVENT_HANDLERS, "test_event", handler)

    asyncio.run(_process_event_safe(fake_redis, json.dumps({"type": "test_event"}), RETRY, DEAD))

    assert fake_redis.pushed(RETRY) == [{"type": "test_event", "_attempt": 2}]
    assert DEAD not in fake_redis.lists


def test_delivery_failure_does_not_requeue(db, provider, queue, fake_redis, use_dispatcher, channel):
    channel.fail = True
    generate_slots(db, provider.id, "2025-06-02", 9, 10)
    reserve(db, provider.id, "2025-06-02", "09:00", "Alice", "0911111111")
    [(_, raw)] = queue.items

    asyncio.run(_process_event_safe(fake_redis, raw, RETRY, DEAD))

    assert fake_redis.lists == {}
    assert channel.attempts == 1


def test_retry_pass_covers_failed_and_stale(db, provider, dispatcher, channel):
    generate_slots(db, provider.id, "2025-06-02", 9, 10)
    failed = reserve(db, provider.id, "2025-06-02", "09:00", "Alice", "0911111111")
    stale = reserve(db, provider.id, "2025-06-02", "09:30", "Bob", "0922222222")

    channel.fail = True
    asyncio.run(dispatcher.send_booking_confirmation(failed.id))
    channel.fail = False

    db.query(Bookings).filter(Bookings.id == stale.id).update(
        {"created_at": utcnow() - timedelta(hours=1)}
    )
    db.commit()

    asyncio.run(run_retry_pass(dispatcher))

    db.expire_all()
    assert db.get(Bookings, failed.id).notification_status == "sent"
    assert db.get(Bookings, stale.id).notification_status == "sent"


def test_handlers_module_is_loaded_with_the_package():
    assert notifications.handlers.handle_booking_created is EVENT_HANDLERS["booking_created"]
