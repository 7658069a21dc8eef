# covergen/features/visual_styles/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from .schemas import VisualStyleCategory
from .service import list_visual_styles

router = APIRouter(prefix="/api", tags=["visual-styles"], dependencies=[Depends(rate_limit("templates"))])


@router.get("/visual-styles")
async def visual_styles_endpoint(category: Optional[VisualStyleCategory] = Query(None)):
    return success(list_visual_styles(category))
