# covergen/features/health/router.py
from fastapi import APIRouter, Depends

from covergen.config import config
from covergen.lib import storage
from covergen.lib.cache import CacheFactory
from covergen.lib.jobs import jobs
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", dependencies=[Depends(rate_limit("health"))])
async def health():
    caches = {
        name: {"entries": s["entries"], "hit_rate": s["hit_rate"]}
        for name, s in ((n, c.stats()) for n, c in CacheFactory.all().items())
    }
    return success({
        "status": "ok",
        "environment": config.environment,
        "storage_mode": storage.storage_mode(),
        "caches": caches,
        "jobs": jobs.count(),
    })
