# covergen/features/account/router.py
from fastapi import APIRouter, Depends, Query

from covergen.lib.auth import require_user
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from covergen.lib.store import User
from .service import subscription_summary, usage_history

router = APIRouter(prefix="/api/user", tags=["account"], dependencies=[Depends(rate_limit("default"))])


@router.get("/subscription")
async def subscription_endpoint(user: User = Depends(require_user)):
    return success(subscription_summary(user.id))


@router.get("/usage")
async def usage_endpoint(
    month: int = Query(0, ge=0, le=24, description="0 = current month, 1 = previous, ..."),
    limit: int = Query(50, ge=1, le=500),
    user: User = Depends(require_user),
):
    return success(usage_history(user.id, month=month, limit=limit))
