# tests/test_notifications.py
from n3_chronos.models import Achievement
from n3_chronos.notifications import DISMISS_AFTER_SECONDS, NotificationSink

BADGE = Achievement("STREAK_3", "On Fire", "Keep a 3-day study streak.")


def test_add_stamps_notification():
    sink = NotificationSink()
    notification = sink.add(BADGE, now=100.0)
    assert notification.id == "STREAK_3"
    assert notification.timestamp == 100.0
    assert sink.notifications == [notification]


def test_timestamps_stay_unique():
    sink = NotificationSink()
    first = sink.add(BADGE, now=100.0)
    second = sink.add(BADGE, now=100.0)
    assert second.timestamp > first.timestamp
    sink.remove(first.timestamp)
    assert sink.notifications == [second]


def test_prune_dismisses_after_five_seconds():
    assert DISMISS_AFTER_SECONDS == 5
    sink = NotificationSink()
    sink.add(BADGE, now=100.0)
    assert len(sink.prune(now=104.9)) == 1
    assert sink.prune(now=105.0) == []


def test_subscribe_and_unsubscribe():
    sink = NotificationSink()
    seen = []
    unsubscribe = sink.subscribe(seen.append)
    sink.add(BADGE, now=1.0)
    unsubscribe()
    sink.add(BADGE, now=2.0)
    assert [n.timestamp for n in seen] == [1.0]
