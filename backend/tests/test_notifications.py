"""NotificationHub buffering, expiry and subscriber isolation."""
from datetime import datetime, timedelta

from tourney.services.notifications import ChangeEvent, NotificationHub


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now


def event(competition_id=1, at=None, type_="update"):
    return ChangeEvent(
        type=type_,
        entity="match",
        competition_id=competition_id,
        organizer_id="org-1",
        payload={"id": 5},
        emitted_at=at or datetime.utcnow(),
    )


def test_publish_reaches_subscribers():
    hub = NotificationHub()
    received = []
    hub.subscribe(received.append)

    e = event()
    hub.publish(e)

    assert received == [e]


def test_unsubscribe_stops_delivery():
    hub = NotificationHub()
    received = []
    unsubscribe = hub.subscribe(received.append)
    unsubscribe()

    hub.publish(event())
    assert received == []


def test_failing_subscriber_does_not_block_others():
    hub = NotificationHub()
    received = []

    def broken(_):
        raise RuntimeError("transport down")

    hub.subscribe(broken)
    hub.subscribe(received.append)
    hub.publish(event())

    assert len(received) == 1


def test_recent_is_per_competition_and_bounded():
    hub = NotificationHub(buffer_size=3)
    for _ in range(5):
        hub.publish(event(competition_id=1))
    hub.publish(event(competition_id=2))

    assert len(hub.recent(1)) == 3
    assert len(hub.recent(2)) == 1
    assert hub.recent(99) == []


def test_recent_drops_expired_events():
    start = datetime(2026, 1, 1, 12, 0, 0)
    clock = FakeClock(start)
    hub = NotificationHub(ttl_seconds=60, clock=clock)

    hub.publish(event(at=start))
    clock.now = start + timedelta(seconds=30)
    hub.publish(event(at=clock.now))
    clock.now = start + timedelta(seconds=75)

    assert [e.emitted_at for e in hub.recent(1)] == [start + timedelta(seconds=30)]


def test_recent_since_is_exclusive():
    start = datetime.utcnow()
    hub = NotificationHub()
    first = event(at=start)
    second = event(at=start + timedelta(seconds=1))
    hub.publish(first)
    hub.publish(second)

    assert hub.recent(1, since=start) == [second]


def test_forget_clears_buffer():
    hub = NotificationHub()
    hub.publish(event())
    hub.forget(1)
    assert hub.recent(1) == []


def test_event_dict_shape():
    data = event().to_dict()
    assert set(data) == {"type", "entity", "competition_id", "organizer_id", "payload", "emitted_at"}


def test_publish_sweeps_stale_buffers():
    clock = FakeClock(datetime(2024, 1, 1, 12, 0))
    hub = NotificationHub(ttl_seconds=60, clock=clock)
    hub.publish(event(competition_id=1, at=clock.now))

    clock.now += timedelta(seconds=120)
    hub.publish(event(competition_id=2, at=clock.now))

    assert 1 not in hub._recent
    assert len(hub.recent(2)) == 1
