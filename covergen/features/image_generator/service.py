# covergen/features/image_generator/service.py
from __future__ import annotations

import re
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Callable, Optional

from covergen.features.creative_director.prompt import (
    IMAGE_PROMPT_MARKER,
    STYLE_PLACEHOLDER,
    SUMMARY_MARKER,
    TITLES_MARKER,
)
from covergen.features.models.registry import ImageModel, get_default_model, get_model
from covergen.features.platforms.schemas import Platform
from covergen.features.templates.schemas import StyleTemplate
from covergen.lib import storage
from covergen.lib.cache import CacheFactory, CacheKeyGenerator
from covergen.lib.errors import AIProviderError, AppError, NotFoundError, ValidationError
from covergen.lib.imaging import fetch_image_bytes, optimize_image, with_resize_params
from covergen.logger import get_logger

from .providers import ProviderImage, generate_with_model

log = get_logger(__name__)

MAX_RETRIES = 3
BASE_RETRY_DELAY = 1.0
WEBP_QUALITY = 85
THUMBNAIL_WIDTH = 400

# the image prompt runs until the next top-level section or the end of the text;
# sub-headings inside it are kept
_PROMPT_RE = re.compile(
    re.escape(IMAGE_PROMPT_MARKER)
    + r"[ \t]*\n(.+?)(?=\n" + re.escape(SUMMARY_MARKER) + r"|\n" + re.escape(TITLES_MARKER) + r"|\Z)",
    re.DOTALL,
)
_SPACES_RE = re.compile(r"[ \t]+")


@dataclass
class GeneratedCover:
    image_url: str
    thumbnail_url: str
    file_size: int
    format: str
    width: int
    height: int
    model_id: str

    def to_dict(self) -> dict:
        return asdict(self)


def extract_image_prompt(full_text: Optional[str], visual_style_prompt: Optional[str] = None) -> str:
    """
    Pull the image prompt out of the creative brief.
    Falls back to everything after the marker, then to the whole text.
    """
    if not full_text or not full_text.strip():
        raise ValidationError("An image prompt is required; run the creative director first", field="external_image_prompt")

    m = _PROMPT_RE.search(full_text)
    prompt = m.group(1).strip() if m else ""
    if not prompt:
        idx = full_text.find(IMAGE_PROMPT_MARKER)
        if idx != -1:
            prompt = full_text[idx + len(IMAGE_PROMPT_MARKER):].strip()
    if not prompt:
        log.warning("no image prompt section found, using the whole brief")
        prompt = full_text.strip()

    if STYLE_PLACEHOLDER in prompt:
        prompt = prompt.replace(STYLE_PLACEHOLDER, visual_style_prompt or "", 1)

    return _SPACES_RE.sub(" ", prompt).strip()


class ImageGenerator:
    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        self._sleep = sleep
        self.cache = CacheFactory.get_instance("images")

    def resolve_model(self, model_id: Optional[str]) -> ImageModel:
        if model_id:
            model = get_model(model_id)
            if model is None:
                raise NotFoundError("Model", model_id)
            return model
        return get_default_model()

    def generate_image(
        self,
        *,
        title: str,
        platform: Platform,
        template: StyleTemplate,
        model_id: Optional[str] = None,
        visual_style_prompt: Optional[str] = None,
        external_image_prompt: Optional[str] = None,
    ) -> GeneratedCover:
        model = self.resolve_model(model_id)
        log.info(f"image generation: platform={platform.id} template={template.id} model={model.id}")

        dims = {"width": platform.dimensions.width, "height": platform.dimensions.height}
        cache_key = CacheKeyGenerator.image_generation(model.id, title, template.id, dims)
        cached = self.cache.get(cache_key)
        if cached is not None:
            log.info(f"image cache hit for {platform.id}: {cached.image_url}")
            return cached

        prompt = extract_image_prompt(external_image_prompt, visual_style_prompt)
        try:
            image = self.generate_with_fallback(prompt, model, platform)
            cover = self.save_image(image, platform, model)
        except AppError:
            raise
        except Exception as e:
            log.error(f"image generation failed for {platform.id}: {e}")
            raise AIProviderError(f"Failed to generate image: {e}")

        self.cache.set(cache_key, cover)
        log.info(f"image generation done: {cover.image_url}")
        return cover

    def generate_with_fallback(self, prompt: str, model: ImageModel, platform: Platform) -> ProviderImage:
        tried = set()
        current: Optional[ImageModel] = model
        last_error: Optional[Exception] = None

        while current is not None and current.id not in tried:
            tried.add(current.id)
            for attempt in range(1, MAX_RETRIES + 1):
                try:
                    return generate_with_model(
                        current,
                        prompt,
                        aspect_ratio=platform.aspect_ratio or "1:1",
                        platform_id=platform.id,
                        width=platform.dimensions.width,
                        height=platform.dimensions.height,
                    )
                except Exception as e:
                    last_error = e
                    log.warning(f"{current.id} failed (attempt {attempt}/{MAX_RETRIES}): {e}")
                    if attempt < MAX_RETRIES:
                        self._sleep(BASE_RETRY_DELAY * 2 ** (attempt - 1))

            next_model = get_model(current.fallback_to) if current.fallback_to else None
            if next_model is not None and next_model.id not in tried:
                log.info(f"falling back from {current.id} to {next_model.id}")
            current = next_model

        raise AIProviderError(f"Image generation failed: {last_error}")

    def save_image(self, image: ProviderImage, platform: Platform, model: ImageModel) -> GeneratedCover:
        if image.data is not None:
            raw = image.data
        else:
            if not image.url or not image.url.strip():
                raise ValueError("Image URL is empty")
            raw = fetch_image_bytes(image.url)

        optimized = optimize_image(
            raw,
            width=platform.dimensions.width,
            height=platform.dimensions.height,
            fmt="webp",
            quality=WEBP_QUALITY,
        )
        key = f"covers/{platform.id}/{uuid.uuid4()}.webp"
        uploaded = storage.upload_image(key, optimized.data, "image/webp")

        url = uploaded["url"]
        thumbnail_url = url
        if storage.storage_mode() == "r2":
            url = with_resize_params(url, width=optimized.width, height=optimized.height, quality=WEBP_QUALITY)
            thumbnail_url = with_resize_params(uploaded["url"], width=THUMBNAIL_WIDTH, quality=75, fit="scale-down")

        log.debug(
            f"saved {key}: {optimized.original_size} -> {optimized.size} bytes "
            f"(ratio {optimized.compression_ratio:.2f})"
        )
        return GeneratedCover(
            image_url=url,
            thumbnail_url=thumbnail_url,
            file_size=optimized.size,
            format=optimized.format,
            width=optimized.width,
            height=optimized.height,
            model_id=model.id,
        )


_instance: Optional[ImageGenerator] = None


def get_image_generator() -> ImageGenerator:
    global _instance
    if _instance is None:
        _instance = ImageGenerator()
    return _instance


def reset_image_generator() -> None:
    global _instance
    _instance = None
