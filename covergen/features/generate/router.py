# covergen/features/generate/router.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Query

from covergen.config import config
from covergen.features.account.service import check_quota
from covergen.features.moderate.service import enforce
from covergen.features.platforms.service import validate_multi_platform_request
from covergen.features.templates.service import get_style_template
from covergen.lib.auth import current_user
from covergen.lib.errors import NotFoundError, ValidationError
from covergen.lib.jobs import ACTIVE_STATUSES, jobs
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import paginate, success
from covergen.lib.store import User
from covergen.logger import get_logger

from .schemas import GenerateCoverRequest, JobStatus
from .service import create_job, dispatch_job, job_view, process_job

router = APIRouter(prefix="/api", tags=["generate"])
log = get_logger(__name__)


def _moderation_bypassed(header_value: Optional[str]) -> bool:
    return bool(config.moderation_bypass_key) and header_value == config.moderation_bypass_key


@router.post("/generate", status_code=202, dependencies=[Depends(rate_limit("generate"))])
async def generate_endpoint(
    req: GenerateCoverRequest,
    background_tasks: BackgroundTasks,
    user: Optional[User] = Depends(current_user),
    x_moderation_bypass: Optional[str] = Header(default=None),
):
    """
    Validates and queues a multi-platform cover job. Returns immediately with
    the job id; poll GET /api/generate/{job_id} for progress and results.
    """
    errors = validate_multi_platform_request(req.text, req.platforms)
    if errors:
        raise ValidationError("; ".join(errors), field="platforms", details={"errors": errors})
    if get_style_template(req.style_template) is None:
        raise ValidationError(f"Unknown style template: {req.style_template}", field="style_template")

    if config.enable_content_moderation and not _moderation_bypassed(x_moderation_bypass):
        enforce(req.text)

    if user is not None:
        check_quota(user.id)

    job = create_job(req, user_id=user.id if user else None)
    dispatch_job(job, background_tasks)
    return success({"job_id": job.id, "status": job.status})


@router.get("/generate", dependencies=[Depends(rate_limit("default"))])
async def list_jobs_endpoint(
    status: Optional[JobStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    views = [job_view(j) for j in jobs.list(status=status)]
    return success(paginate(views, page=page, limit=limit))


@router.get("/generate/{job_id}", dependencies=[Depends(rate_limit("default"))])
async def job_status_endpoint(job_id: str):
    job = jobs.get(job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    return success(job_view(job))


@router.delete("/generate/{job_id}", dependencies=[Depends(rate_limit("default"))])
async def delete_job_endpoint(job_id: str):
    job = jobs.get(job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    if job.status in ACTIVE_STATUSES:
        raise ValidationError("Cannot delete job that is currently processing")
    jobs.delete(job_id)
    log.info(f"[{job_id}] deleted")
    return success({"message": "Job deleted successfully"})


@router.post("/tasks/worker/generate/{job_id}")
def worker_endpoint(job_id: str):
    """
    Cloud Tasks target. Always acks with 200 so the queue does not retry
    a job that is unknown or already handled.
    """
    job = process_job(job_id)
    if job is None:
        return {"job_id": job_id, "ok": False, "error": "unknown job"}
    return {"job_id": job_id, "ok": True, "status": job.status}
