# covergen/features/errors_log/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request

from covergen.config import config
from covergen.lib.errors import UnauthorizedError
from covergen.lib.rate_limit import client_ip, rate_limit
from covergen.lib.responses import success
from .schemas import ClientErrorReport
from .service import error_log

router = APIRouter(prefix="/api/errors", tags=["errors"], dependencies=[Depends(rate_limit("default"))])


@router.post("/log", status_code=201)
async def log_error_endpoint(report: ClientErrorReport, request: Request):
    entry = error_log.add(report, ip=client_ip(request))
    return success({"id": entry.id, "logged": True})


@router.get("/log")
async def list_errors_endpoint(
    limit: int = Query(100, ge=1, le=1000),
    authorization: Optional[str] = Header(default=None),
):
    if config.is_production:
        expected = f"Bearer {config.error_log_token}"
        if not config.error_log_token or authorization != expected:
            raise UnauthorizedError()
    entries = error_log.recent(limit)
    return success({"errors": entries, "total": error_log.count()})
