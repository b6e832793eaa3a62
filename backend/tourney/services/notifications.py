"""
Change notifications for live clients.

Events are advisory: fire-and-forget, at-least-once, no ordering across
competitions. Clients re-fetch the competition/matches for authoritative
state. The fanout transport subscribes a callback here; the hub also keeps
a bounded, time-limited buffer of recent events per competition that
clients can poll.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

EVENT_CREATE = "create"
EVENT_UPDATE = "update"
EVENT_DELETE = "delete"

ENTITY_COMPETITION = "competition"
ENTITY_TEAM = "team"
ENTITY_MATCH = "match"
ENTITY_BRACKET = "bracket"


@dataclass(frozen=True)
class ChangeEvent:
    type: str
    entity: str
    competition_id: Optional[int]
    organizer_id: Optional[str]
    payload: Dict[str, Any] = field(default_factory=dict)
    emitted_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "entity": self.entity,
            "competition_id": self.competition_id,
            "organizer_id": self.organizer_id,
            "payload": self.payload,
            "emitted_at": self.emitted_at.isoformat(),
        }


Subscriber = Callable[[ChangeEvent], None]


class NotificationHub:
    def __init__(
        self,
        buffer_size: int = 200,
        ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self._buffer_size = buffer_size
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._subscribers: List[Subscriber] = []
        self._recent: Dict[int, Deque[ChangeEvent]] = {}

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        """Buffer *event* and hand it to every subscriber. Subscriber failures never reach the caller."""
        with self._lock:
            self._sweep()
            if event.competition_id is not None:
                buf = self._recent.setdefault(event.competition_id, deque(maxlen=self._buffer_size))
                buf.append(event)
            subscribers = list(self._subscribers)

        logger.info(
            "Emitted %s/%s for competition %s",
            event.entity,
            event.type,
            event.competition_id,
        )
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Notification subscriber %r failed for %s/%s", callback, event.entity, event.type)

    def recent(self, competition_id: int, since: Optional[datetime] = None) -> List[ChangeEvent]:
        """Buffered events for one competition, oldest first."""
        with self._lock:
            buf = self._recent.get(competition_id)
            if not buf:
                return []
            self._expire(buf)
            events = list(buf)
        if since is not None:
            events = [e for e in events if e.emitted_at > since]
        return events

    def forget(self, competition_id: int) -> None:
        with self._lock:
            self._recent.pop(competition_id, None)

    def _sweep(self) -> None:
        """Expire every buffer and drop the ones left empty. Caller holds _lock."""
        for competition_id in list(self._recent):
            buf = self._recent[competition_id]
            self._expire(buf)
            if not buf:
                del self._recent[competition_id]

    def _expire(self, buf: Deque[ChangeEvent]) -> None:
        cutoff = self._clock() - self._ttl
        while buf and buf[0].emitted_at < cutoff:
            buf.popleft()
