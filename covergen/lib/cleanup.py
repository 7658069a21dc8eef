# covergen/lib/cleanup.py
from datetime import datetime, timedelta, timezone

from covergen.lib.jobs import JobStore


def sweep_finished_jobs(store: JobStore, *, ttl_hours: int) -> int:
    """
    Drop jobs that are completed or failed and were last updated more than
    ttl_hours ago. Returns how many were removed.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(hours=ttl_hours)
    removed = 0
    for job in store.list():
        if job.finished and job.updated_at <= cutoff:
            if store.delete(job.id):
                removed += 1
    return removed
