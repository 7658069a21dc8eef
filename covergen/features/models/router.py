# covergen/features/models/router.py
from fastapi import APIRouter, Depends

from covergen.lib.errors import AIProviderError
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from .registry import get_available_models, get_default_model, to_public_info

router = APIRouter(prefix="/api", tags=["models"], dependencies=[Depends(rate_limit("default"))])


@router.get("/models")
async def models_endpoint():
    # same display name may be offered by several channels; keep the preferred one
    by_name = {}
    for m in get_available_models():
        if m.name not in by_name or m.priority < by_name[m.name].priority:
            by_name[m.name] = m
    models = sorted(by_name.values(), key=lambda m: m.priority)

    try:
        default_id = get_default_model().id
    except AIProviderError:
        default_id = None

    return success({
        "models": [to_public_info(m) for m in models],
        "default_model_id": default_id,
    })
