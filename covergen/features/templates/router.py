# covergen/features/templates/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from covergen.lib.cache import CacheFactory, CacheKeyGenerator
from covergen.lib.errors import NotFoundError
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from .schemas import TemplateCategory
from .service import get_style_template, list_style_templates

router = APIRouter(prefix="/api", tags=["templates"], dependencies=[Depends(rate_limit("templates"))])


@router.get("/templates")
async def templates_endpoint(category: Optional[TemplateCategory] = Query(None)):
    return success(list_style_templates(category))


@router.get("/templates/{template_id}")
async def template_endpoint(template_id: str):
    cache = CacheFactory.get_instance("templates")
    key = CacheKeyGenerator.template(template_id)
    cached = cache.get(key)
    if cached is not None:
        return success(cached, meta={"cached": True})

    template = get_style_template(template_id)
    if template is None:
        raise NotFoundError("Template", template_id)
    data = template.model_dump()
    cache.set(key, data)
    return success(data, meta={"cached": False})
