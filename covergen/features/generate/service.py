# covergen/features/generate/service.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import BackgroundTasks

from covergen.config import config
from covergen.features.account.service import COVER_GENERATION, record_usage
from covergen.features.pipeline.service import CoverPipeline, pipeline
from covergen.lib.cloud_tasks import enqueue_generation
from covergen.lib.jobs import COMPLETED, FAILED, PENDING, PROCESSING, Job, jobs
from covergen.logger import get_logger

from .schemas import GenerateCoverRequest, JobView

log = get_logger(__name__)

DEFAULT_ESTIMATE_MS = 120_000
MAX_ESTIMATE_MS = 300_000


def estimate_time_remaining(job: Job, now: Optional[datetime] = None) -> int:
    """Milliseconds left, extrapolated linearly from progress so far."""
    if job.finished:
        return 0
    if job.progress <= 0:
        return DEFAULT_ESTIMATE_MS
    if job.progress >= 100:
        return 0
    now = now or datetime.now(timezone.utc)
    elapsed_ms = (now - job.created_at).total_seconds() * 1000
    remaining = elapsed_ms * (100 - job.progress) / job.progress
    return int(min(max(remaining, 0), MAX_ESTIMATE_MS))


def job_view(job: Job) -> JobView:
    return JobView(
        job_id=job.id,
        status=job.status,
        progress=job.progress,
        step=job.step,
        request=job.request,
        results=job.results,
        error=job.error,
        created_at=job.created_at,
        updated_at=job.updated_at,
        estimated_time_remaining=estimate_time_remaining(job),
    )


def create_job(req: GenerateCoverRequest, *, user_id: Optional[str] = None) -> Job:
    job = jobs.create(req.model_dump(), user_id=user_id)
    log.info(f"[{job.id}] job created: {len(req.platforms)} platform(s), user={user_id or 'anonymous'}")
    return job


def dispatch_job(job: Job, background_tasks: BackgroundTasks) -> None:
    """Run inline after the response, or hand the job to Cloud Tasks."""
    if config.job_dispatch == "cloud_tasks":
        task_name = enqueue_generation(job.id, {"job_id": job.id})
        jobs.update(job.id, task_name=task_name)
        return
    background_tasks.add_task(process_job, job.id)


def process_job(job_id: str, runner: Optional[CoverPipeline] = None) -> Optional[Job]:
    """
    Execute a queued job. Safe to call more than once: anything that is not
    pending is acknowledged and left alone.
    """
    job = jobs.get(job_id)
    if job is None:
        log.warning(f"[{job_id}] unknown job, skipping")
        return None
    if job.status != PENDING:
        log.info(f"[{job_id}] already {job.status}, skipping")
        return job

    jobs.update(job_id, status=PROCESSING, started_at=datetime.now(timezone.utc))
    runner = runner or pipeline

    def on_progress(step: str, progress: int) -> None:
        jobs.update(job_id, step=step, progress=max(0, min(100, int(progress))))

    try:
        req = GenerateCoverRequest(**job.request)
        results = runner.execute_with_progress(req, on_progress)
    except Exception as e:
        log.exception(f"[{job_id}] pipeline failed: {e}")
        return jobs.update(job_id, status=FAILED, error=str(e))

    succeeded = [r for r in results if r.get("status") == "completed"]
    if succeeded:
        status, error = COMPLETED, None
    else:
        status = FAILED
        error = "; ".join(f"{r['platform_id']}: {r.get('error')}" for r in results) or "No covers generated"

    job = jobs.update(job_id, status=status, results=results, error=error, progress=100)
    log.info(f"[{job_id}] {status}: {len(succeeded)}/{len(results)} platform(s)")

    if job.user_id and succeeded:
        record_usage(
            job.user_id,
            COVER_GENERATION,
            len(succeeded),
            {"job_id": job_id, "platforms": [r["platform_id"] for r in succeeded]},
        )
    return job
