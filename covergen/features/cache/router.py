# covergen/features/cache/router.py
from typing import Optional

from fastapi import APIRouter, Depends

from covergen.lib.errors import NotFoundError, ValidationError
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from .schemas import CacheClearRequest, CacheSetRequest, CacheWarmRequest
from .service import all_stats, get_cache, warm

router = APIRouter(prefix="/api/cache", tags=["cache"], dependencies=[Depends(rate_limit("default"))])


@router.get("")
async def stats_endpoint():
    return success(all_stats())


# declared before /{cache} so "warm" is not taken for a cache name
@router.post("/warm")
async def warm_endpoint(req: Optional[CacheWarmRequest] = None):
    return success(warm(req.strategy if req else "all"))


@router.get("/{cache}/{key}")
async def get_entry_endpoint(cache: str, key: str):
    value = get_cache(cache).get(key)
    if value is None:
        raise NotFoundError("Cache entry", key)
    return success({"cache": cache, "key": key, "value": value, "found": True})


@router.post("/{cache}")
async def set_entry_endpoint(cache: str, req: CacheSetRequest):
    c = get_cache(cache)
    c.set(req.key, req.value, req.ttl)
    return success({"cache": cache, "key": req.key, "ttl": req.ttl or c.default_ttl, "cached": True})


@router.delete("/{cache}/{key}")
async def delete_entry_endpoint(cache: str, key: str):
    if not get_cache(cache).delete(key):
        raise NotFoundError("Cache entry", key)
    return success({"cache": cache, "key": key, "deleted": True})


@router.put("/{cache}/clear")
async def clear_endpoint(cache: str, req: Optional[CacheClearRequest] = None):
    if req and req.pattern:
        raise ValidationError("Pattern-based clearing not supported", field="pattern")
    get_cache(cache).clear()
    return success({"cache": cache, "cleared": True})
