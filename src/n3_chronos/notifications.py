"""Short-lived notifications for unlocked achievements and level-ups."""
import time
from typing import Callable

from n3_chronos.models import Achievement, Notification

DISMISS_AFTER_SECONDS = 5


class NotificationSink:
    """Ordered queue of notifications awaiting display.

    Notifications expire DISMISS_AFTER_SECONDS after they were added; call
    prune() from the display loop. Subscribers are called on every add
    until their unsubscribe callable is invoked.
    """

    def __init__(self, dismiss_after: float = DISMISS_AFTER_SECONDS):
        self.dismiss_after = dismiss_after
        self.notifications: list[Notification] = []
        self._subscribers: list[Callable[[Notification], None]] = []

    def add(self, achievement: Achievement, now: float | None = None) -> Notification:
        timestamp = time.time() if now is None else now
        # Timestamps double as ids for remove(); keep them unique
        if self.notifications and timestamp <= self.notifications[-1].timestamp:
            timestamp = self.notifications[-1].timestamp + 1e-6
        notification = Notification(
            id=achievement.id,
            name=achievement.name,
            description=achievement.description,
            timestamp=timestamp,
        )
        self.notifications.append(notification)
        for callback in list(self._subscribers):
            callback(notification)
        return notification

    def remove(self, timestamp: float) -> None:
        self.notifications = [n for n in self.notifications if n.timestamp != timestamp]

    def prune(self, now: float | None = None) -> list[Notification]:
        """Drop expired notifications and return the ones still showing."""
        now = time.time() if now is None else now
        self.notifications = [
            n for n in self.notifications if now - n.timestamp < self.dismiss_after
        ]
        return list(self.notifications)

    def subscribe(self, callback: Callable[[Notification], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def clear(self) -> None:
        self.notifications = []
