# covergen/features/platforms/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from covergen.lib.errors import NotFoundError
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from .schemas import PlatformCategory
from .service import get_platform, list_platforms

router = APIRouter(prefix="/api", tags=["platforms"], dependencies=[Depends(rate_limit("default"))])


@router.get("/platforms")
async def platforms_endpoint(category: Optional[PlatformCategory] = Query(None)):
    return success(list_platforms(category))


@router.get("/platforms/{platform_id}")
async def platform_endpoint(platform_id: str):
    platform = get_platform(platform_id)
    if platform is None:
        raise NotFoundError("Platform", platform_id)
    return success(platform)
