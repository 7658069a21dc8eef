# covergen/features/analytics/router.py
from fastapi import APIRouter, Depends, Request

from covergen.lib.rate_limit import client_ip, rate_limit
from covergen.lib.responses import success
from .schemas import EventBatch
from .service import tracker

router = APIRouter(prefix="/api/analytics", tags=["analytics"], dependencies=[Depends(rate_limit("analytics"))])


@router.post("/events")
async def track_events_endpoint(batch: EventBatch, request: Request):
    return success(tracker.track_batch(batch, ip=client_ip(request)))
