# covergen/features/storage/router.py
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from covergen.lib import storage
from covergen.lib.errors import AppError, NotFoundError, ValidationError
from covergen.lib.imaging import content_type_for
from covergen.lib.rate_limit import rate_limit

router = APIRouter(prefix="/api", tags=["storage"], dependencies=[Depends(rate_limit("health"))])


@router.get("/storage/{path:path}")
async def storage_proxy_endpoint(path: str):
    """Serves objects written by the local driver. Remote drivers hand out their own URLs."""
    if storage.storage_mode() != "local":
        raise AppError("Storage proxy is only available in local mode", code="NOT_FOUND", status_code=404)
    if ".." in path or path.startswith("/"):
        raise ValidationError("Invalid path", field="path")

    data = storage.get_image(path)
    if data is None:
        raise NotFoundError("File", path)
    return Response(
        content=data,
        media_type=content_type_for(path),
        headers={"Cache-Control": storage.LONG_CACHE},
    )
