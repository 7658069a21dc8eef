# covergen/features/errors_log/service.py
from __future__ import annotations

import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List

from covergen.logger import get_logger

from .schemas import ClientErrorEntry, ClientErrorReport

log = get_logger(__name__)

MAX_ENTRIES = 1000


class ClientErrorLog:
    """Ring buffer of browser-reported errors, newest kept."""

    def __init__(self, max_entries: int = MAX_ENTRIES):
        self._entries: Deque[ClientErrorEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def add(self, report: ClientErrorReport, *, ip: str) -> ClientErrorEntry:
        entry = ClientErrorEntry(
            id=str(uuid.uuid4()),
            ip=ip,
            timestamp=datetime.now(timezone.utc),
            **report.model_dump(),
        )
        with self._lock:
            self._entries.append(entry)
        log.warning(f"client {entry.level} from {entry.component or 'app'}: {entry.message}")
        return entry

    def recent(self, limit: int = 100) -> List[ClientErrorEntry]:
        with self._lock:
            entries = list(self._entries)
        return list(reversed(entries))[:limit]

    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


error_log = ClientErrorLog()
