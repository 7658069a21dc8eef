# covergen/lib/responses.py
from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from covergen.config import config
from covergen.lib.errors import AppError, code_for_status
from covergen.lib.rate_limit import rate_limit_headers
from covergen.logger import get_logger

log = get_logger(__name__)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_meta(request_id: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    meta = {
        "request_id": request_id or str(uuid.uuid4()),
        "timestamp": utcnow_iso(),
        "version": config.app_version,
    }
    meta.update(extra)
    return meta


def success(data: Any = None, *, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Success envelope. Routes return the dict and FastAPI serializes it."""
    return {
        "success": True,
        "data": jsonable_encoder(data),
        "meta": make_meta(**(meta or {})),
    }


def paginate(items: List[Any], *, page: int, limit: int, total: Optional[int] = None) -> Dict[str, Any]:
    """
    Slice `items` for the requested page unless `total` is given, in which case
    `items` is assumed to already be the page.
    """
    if total is None:
        total = len(items)
        start = (page - 1) * limit
        items = items[start:start + limit]
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def _merged_headers(request: Request, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = rate_limit_headers(request)
    merged.update(headers or {})
    return merged


def error_response(
    status_code: int,
    code: str,
    message: str,
    *,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    body = {"success": False, "error": error, "meta": make_meta()}
    return JSONResponse(jsonable_encoder(body), status_code=status_code, headers=headers)


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    else:
        log.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return error_response(
        exc.status_code,
        exc.code,
        exc.message,
        details=exc.details,
        headers=_merged_headers(request, exc.headers),
    )


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    details = None if isinstance(exc.detail, str) else exc.detail
    return error_response(
        exc.status_code,
        code_for_status(exc.status_code),
        message,
        details=details,
        headers=_merged_headers(request, getattr(exc, "headers", None)),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    parts = []
    for e in errors:
        loc = ".".join(str(x) for x in e.get("loc", ()) if x not in ("body", "query", "path"))
        parts.append(f"{loc}: {e.get('msg')}" if loc else str(e.get("msg")))
    return error_response(
        400,
        "VALIDATION_ERROR",
        "Validation error: " + "; ".join(parts),
        details=errors,
        headers=_merged_headers(request, None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception(f"unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "INTERNAL_ERROR", "An internal error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
