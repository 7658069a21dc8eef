# covergen/features/moderate/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from covergen.lib.errors import ValidationError
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from .schemas import ModerateRequest
from .service import flagged_reason, generate_safe_alternative, is_content_safe, moderate_batch, moderate_text

router = APIRouter(prefix="/api", tags=["moderation"], dependencies=[Depends(rate_limit("moderate"))])


@router.post("/moderate")
async def moderate_endpoint(req: ModerateRequest):
    if req.batch:
        results = moderate_batch([req.content])
        return success({"results": results, "safe": not any(r.flagged for r in results)})

    result = moderate_text(req.content)
    alternative = None
    if result.flagged and not req.strict:
        alternative = generate_safe_alternative(req.content)

    return success({
        "safe": not result.flagged,
        "flagged": result.flagged,
        "categories": result.categories,
        "scores": result.category_scores,
        "reason": flagged_reason(result),
        "alternative": alternative,
    })


@router.get("/moderate")
async def moderate_status_endpoint(content: Optional[str] = Query(None)):
    if not content:
        raise ValidationError("Content parameter is required", field="content")
    safe, reason = is_content_safe(content)
    return success({"safe": safe, "reason": reason})
