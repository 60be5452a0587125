import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from config import settings


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    created_at: float
    ttl: float
    id: int = field(default=0, compare=False)

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl


class NotificationQueue:
    """Outcome messages waiting to be shown by the presentation layer.

    Producers only push typed notifications; rendering them (and letting
    them auto-dismiss) is up to whoever drains the queue.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl if ttl is not None else settings.notification_ttl_seconds
        self._clock = clock
        self._items: deque[Notification] = deque()
        self._next_id = 1

    def push(self, kind: NotificationKind, message: str) -> Notification:
        notification = Notification(kind, message, self._clock(), self.ttl, self._next_id)
        self._next_id += 1
        self._items.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.push(NotificationKind.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.push(NotificationKind.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.push(NotificationKind.INFO, message)

    def active(self) -> list[Notification]:
        now = self._clock()
        while self._items and self._items[0].expired(now):
            self._items.popleft()
        return [n for n in self._items if not n.expired(now)]

    def drain(self) -> list[Notification]:
        items = self.active()
        self._items.clear()
        return items

    def dismiss(self, notification_id: int) -> None:
        self._items = deque(n for n in self._items if n.id != notification_id)

    def __len__(self) -> int:
        return len(self.active())
