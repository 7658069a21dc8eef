# covergen/features/debug/router.py
import time

from fastapi import APIRouter, Depends

from covergen.config import config
from covergen.features.creative_director.prompt import build_director_prompt
from covergen.features.creative_director.service import get_creative_director
from covergen.features.platforms.service import get_platform
from covergen.features.visual_styles.service import get_visual_style
from covergen.lib.errors import NotFoundError, ValidationError
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from covergen.logger import get_logger
from .schemas import PromptPreviewRequest

router = APIRouter(prefix="/api/debug", tags=["debug"], dependencies=[Depends(rate_limit("default"))])
log = get_logger(__name__)


@router.post("/prompt")
def prompt_preview_endpoint(req: PromptPreviewRequest):
    """
    Runs only the creative director for one platform and returns the prompt
    it was given along with the brief. No image is generated. Hidden in production.
    """
    if config.is_production:
        raise NotFoundError("Route")

    platform = get_platform(req.platform_id)
    if platform is None:
        raise ValidationError(f"Unknown platform: {req.platform_id}", field="platform_id")
    style = get_visual_style(req.visual_style_id) if req.visual_style_id else None
    if req.visual_style_id and style is None:
        raise ValidationError(f"Unknown visual style: {req.visual_style_id}", field="visual_style_id")
    fragment = style.prompt_fragment if style else None

    prompt = build_director_prompt(
        user_content=req.text,
        platform_name=platform.name,
        width=platform.dimensions.width,
        height=platform.dimensions.height,
        visual_style=fragment,
    )
    started = time.monotonic()
    brief = get_creative_director().analyze(user_content=req.text, platform=platform, visual_style_prompt=fragment)
    duration_ms = int((time.monotonic() - started) * 1000)
    log.info(f"prompt preview for {platform.id}: {len(brief.title_suggestions)} titles in {duration_ms}ms")

    return success({
        "prompt": prompt,
        "full_text": brief.full_text,
        "title_suggestions": brief.title_suggestions,
        "fallback": brief.fallback,
        "metadata": {
            "platform": platform.name,
            "dimensions": platform.dimensions,
            "duration_ms": duration_ms,
        },
    })
