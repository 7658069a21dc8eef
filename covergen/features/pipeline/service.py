# covergen/features/pipeline/service.py
from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, List, Optional

from covergen.features.creative_director.schemas import DirectorOutput
from covergen.features.creative_director.service import CreativeDirector, get_creative_director
from covergen.features.generate.schemas import GenerateCoverRequest
from covergen.features.image_generator.service import ImageGenerator, get_image_generator
from covergen.features.platforms.service import get_platform
from covergen.features.templates.service import get_style_template
from covergen.features.visual_styles.service import get_visual_style
from covergen.lib.cache import CacheFactory, CacheKeyGenerator
from covergen.lib.errors import NotFoundError
from covergen.logger import get_logger

log = get_logger(__name__)

ProgressCallback = Callable[[str, int], None]


def _noop(step: str, progress: int) -> None:
    pass


class CoverPipeline:
    """
    Runs director -> image generator once per requested platform.

    Platforms are isolated: a failure on one is recorded as a failed result
    and the remaining platforms still run.
    """

    def __init__(
        self,
        director: Optional[CreativeDirector] = None,
        image_generator: Optional[ImageGenerator] = None,
        use_response_cache: bool = True,
    ):
        self._director = director
        self._image_generator = image_generator
        self.use_response_cache = use_response_cache

    @property
    def director(self) -> CreativeDirector:
        return self._director or get_creative_director()

    @property
    def image_generator(self) -> ImageGenerator:
        return self._image_generator or get_image_generator()

    def execute(self, request: GenerateCoverRequest) -> List[Dict[str, Any]]:
        return self.execute_with_progress(request, None)

    def execute_with_progress(self, request: GenerateCoverRequest, on_progress: Optional[ProgressCallback] = None) -> List[Dict[str, Any]]:
        progress = on_progress or _noop
        progress("Starting", 0)
        log.info(
            f"pipeline start: {len(request.text)} chars, template={request.style_template}, "
            f"platforms={','.join(request.platforms)}, model={request.model_id or 'default'}"
        )

        progress("Loading template", 5)
        template = get_style_template(request.style_template)
        if template is None:
            raise NotFoundError("Style template", request.style_template)

        visual_style_prompt = None
        if request.visual_style_id:
            style = get_visual_style(request.visual_style_id)
            if style is not None:
                visual_style_prompt = style.prompt_fragment
                log.info(f"visual style: {style.name}")
            else:
                log.warning(f"unknown visual style {request.visual_style_id}, ignoring")

        progress("Preparing analysis", 10)
        results: List[Dict[str, Any]] = []
        total = len(request.platforms)

        for i, platform_id in enumerate(request.platforms):
            try:
                platform = get_platform(platform_id)
                if platform is None:
                    raise NotFoundError("Platform", platform_id)

                progress(f"Analyzing content for {platform.name}", round(10 + i * 30 / total))
                brief = self._analyze(request.text, platform, visual_style_prompt)

                progress(f"Analysis complete for {platform.name}", round(40 + i * 5 / total))
                title = brief.best_title or request.text[:20]

                progress(f"Generating image for {platform.name}", round(45 + i * 45 / total))
                cover = self.image_generator.generate_image(
                    title=title,
                    platform=platform,
                    template=template,
                    model_id=request.model_id,
                    visual_style_prompt=visual_style_prompt,
                    external_image_prompt=brief.full_text,
                )

                progress(f"Image generated for {platform.name}", round(90 + i * 5 / total))
                results.append({
                    "id": str(uuid.uuid4()),
                    "platform_id": platform.id,
                    "status": "completed",
                    "image_url": cover.image_url,
                    "thumbnail_url": cover.thumbnail_url,
                    "title": title,
                    "metadata": {
                        "file_size": cover.file_size,
                        "format": cover.format,
                        "dimensions": {"width": cover.width, "height": cover.height},
                        "model_id": cover.model_id,
                    },
                })
            except Exception as e:
                log.error(f"platform {platform_id} failed: {e}")
                results.append({"platform_id": platform_id, "status": "failed", "error": str(e)})

        progress("Processing results", 95)
        progress("Completed", 100)
        ok = sum(1 for r in results if r["status"] == "completed")
        log.info(f"pipeline done: {ok}/{total} platforms succeeded")
        return results

    def _analyze(self, text: str, platform, visual_style_prompt: Optional[str]) -> DirectorOutput:
        if not self.use_response_cache:
            return self.director.analyze(user_content=text, platform=platform, visual_style_prompt=visual_style_prompt)

        cache = CacheFactory.get_instance("ai_responses")
        key = CacheKeyGenerator.ai_response(
            "director", {"text": text, "platform": platform.id, "visual_style": visual_style_prompt or ""}
        )
        cached = cache.get(key)
        if cached is not None:
            log.debug(f"director cache hit for {platform.id}")
            return cached

        brief = self.director.analyze(user_content=text, platform=platform, visual_style_prompt=visual_style_prompt)
        # fallback briefs are not worth remembering
        if not brief.fallback:
            cache.set(key, brief)
        return brief


pipeline = CoverPipeline()
