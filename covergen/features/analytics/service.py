# covergen/features/analytics/service.py
from __future__ import annotations

import random
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from covergen.config import config
from covergen.logger import get_logger

from .schemas import EventBatch, TrackedEvent

log = get_logger(__name__)

MAX_EVENTS = 5000
SESSION_EVENT = "session_update"


class EventTracker:
    """
    Server-side sink for front-end analytics. Every kept event is written to
    the log and to a bounded in-memory buffer; `sample_rate` thins the stream.
    """

    def __init__(
        self,
        max_events: int = MAX_EVENTS,
        sample_rate: Optional[float] = None,
        rand: Callable[[], float] = random.random,
    ):
        self._events: Deque[TrackedEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()
        self._sample_rate = sample_rate
        self._rand = rand

    @property
    def sample_rate(self) -> float:
        return config.analytics_sample_rate if self._sample_rate is None else self._sample_rate

    def track(
        self,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
        *,
        session_id: Optional[str] = None,
        ip: Optional[str] = None,
    ) -> Optional[TrackedEvent]:
        if self.sample_rate < 1.0 and self._rand() > self.sample_rate:
            return None
        entry = TrackedEvent(
            event=event,
            properties=dict(properties or {}),
            session_id=session_id,
            ip=ip,
            timestamp=datetime.now(timezone.utc),
        )
        with self._lock:
            self._events.append(entry)
        log.info(f"analytics {event} session={session_id or '-'} {entry.properties}")
        return entry

    def track_batch(self, batch: EventBatch, *, ip: Optional[str] = None) -> Dict[str, Any]:
        session_id = batch.session.id if batch.session else None
        server_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
        for e in batch.events:
            props = dict(e.properties or {})
            props["client_timestamp"] = e.timestamp
            props["server_timestamp"] = server_ms
            self.track(e.event, props, session_id=session_id, ip=ip)

        if batch.session:
            s = batch.session
            self.track(
                SESSION_EVENT,
                {
                    "session_duration": s.duration,
                    "page_views": s.page_views,
                    "features_used": s.features_used,
                    "features_count": len(s.features_used),
                },
                session_id=s.id,
                ip=ip,
            )
        return {"processed": len(batch.events), "session_tracked": batch.session is not None}

    def recent(self, limit: int = 100) -> List[TrackedEvent]:
        with self._lock:
            events = list(self._events)
        return list(reversed(events))[:limit]

    def count(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


tracker = EventTracker()
