# covergen/features/admin/router.py
from fastapi import APIRouter

from covergen.config import config
from covergen.lib.cleanup import sweep_finished_jobs
from covergen.lib.jobs import jobs
from covergen.lib.responses import success

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/sweep")
async def sweep():
    removed = sweep_finished_jobs(jobs, ttl_hours=config.sweep_ttl_hours)
    return success({"removed": removed, "remaining": jobs.count(), "ttl_hours": config.sweep_ttl_hours})
