# covergen/lib/jobs.py
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"

JOB_STATUSES = (PENDING, PROCESSING, COMPLETED, FAILED)
ACTIVE_STATUSES = (PENDING, PROCESSING)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Job:
    id: str
    request: Dict[str, Any]
    user_id: Optional[str] = None
    status: str = PENDING
    progress: int = 0
    step: Optional[str] = None
    results: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None
    task_name: Optional[str] = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    started_at: Optional[datetime] = None

    @property
    def finished(self) -> bool:
        return self.status in (COMPLETED, FAILED)


class JobStore:
    """Thread-safe in-memory job table keyed by job id."""

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, request: Dict[str, Any], user_id: Optional[str] = None, job_id: Optional[str] = None) -> Job:
        job = Job(id=job_id or str(uuid.uuid4()), request=request, user_id=user_id)
        with self._lock:
            self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def update(self, job_id: str, **fields: Any) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            for k, v in fields.items():
                setattr(job, k, v)
            job.updated_at = _now()
            return job

    def delete(self, job_id: str) -> bool:
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def list(self, status: Optional[str] = None) -> List[Job]:
        with self._lock:
            jobs = list(self._jobs.values())
        if status:
            jobs = [j for j in jobs if j.status == status]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    def count(self) -> int:
        return len(self._jobs)

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()


jobs = JobStore()
