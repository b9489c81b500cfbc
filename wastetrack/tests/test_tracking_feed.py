"""
Tracking feed tests.
"""

import pytest

from wastetrack.app.core.exceptions import ValidationError
from wastetrack.app.models.enums import TrackingEventKind
from wastetrack.app.services.tracking_feed import TrackingFeed


@pytest.fixture
def feed(clock):
    return TrackingFeed(clock=clock)


def test_sequence_starts_at_one(feed, clock):
    assert feed.last_sequence == 0

    event = feed.publish(TrackingEventKind.LOCATION_UPDATE, {"latitude": 1.0}, route_id="r1")

    assert event.sequence == 1
    assert event.timestamp == clock.now
    assert event.route_id == "r1"
    assert feed.last_sequence == 1


def test_since_returns_suffix(feed):
    for kind in ("stop-started", "location-update", "eta-changed", "stop-completed"):
        feed.publish(kind)

    assert [e.sequence for e in feed.since(0)] == [1, 2, 3, 4]
    assert [e.sequence for e in feed.since(2)] == [3, 4]
    assert feed.since(4) == []
    assert feed.since(10) == []


def test_since_is_repeatable(feed):
    feed.publish("stop-started")
    first = feed.since(0)
    second = feed.since(0)

    assert first == second

    # Later publishes never change what was already returned
    feed.publish("stop-completed")
    assert first == second
    assert len(feed.since(0)) == 2


@pytest.mark.parametrize("cursor", [-1, 1.5, "3", True])
def test_since_rejects_bad_cursor(feed, cursor):
    with pytest.raises(ValidationError):
        feed.since(cursor)


def test_unknown_kind_rejected(feed):
    with pytest.raises(ValidationError):
        feed.publish("teleported")
    assert feed.last_sequence == 0


def test_payload_is_copied(feed):
    payload = {"etaMinutes": 12.0}
    event = feed.publish("eta-changed", payload)

    payload["etaMinutes"] = 99.0
    assert event.payload == {"etaMinutes": 12.0}


def test_subscribers_receive_events(feed):
    received = []
    unsubscribe = feed.subscribe(received.append)

    feed.publish("stop-started")
    unsubscribe()
    feed.publish("stop-completed")

    assert [e.kind for e in received] == [TrackingEventKind.STOP_STARTED]


def test_failing_subscriber_does_not_block_publish(feed, caplog):
    received = []

    def broken(event):
        raise RuntimeError("display went away")

    feed.subscribe(broken)
    feed.subscribe(received.append)

    event = feed.publish("stop-started")

    assert received == [event]
    assert feed.last_sequence == 1
    assert "Tracking subscriber failed" in caplog.text


def test_returned_events_cannot_rewrite_history(feed):
    feed.publish("stop-started", {"collectionId": "c1", "meta": {"attempt": 1}})

    returned = feed.since(0)[0]
    returned.payload["collectionId"] = "tampered"
    returned.payload["meta"]["attempt"] = 99

    assert feed.since(0)[0].payload == {"collectionId": "c1", "meta": {"attempt": 1}}


def test_published_and_delivered_events_are_detached(feed):
    received = []
    feed.subscribe(received.append)

    published = feed.publish("eta-changed", {"etaMinutes": 12.0})
    published.payload["etaMinutes"] = 0.0
    received[0].payload["etaMinutes"] = 1.0

    assert feed.since(0)[0].payload == {"etaMinutes": 12.0}


def test_nested_payload_is_copied_on_publish(feed):
    payload = {"stop": {"collectionId": "c1"}}
    feed.publish("stop-started", payload)

    payload["stop"]["collectionId"] = "c9"
    assert feed.since(0)[0].payload == {"stop": {"collectionId": "c1"}}
