# covergen/features/image_generator/providers.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from covergen.config import api_key_for
from covergen.features.models.registry import GEMINI, OPENAI_COMPATIBLE, REPLICATE, ImageModel
from covergen.lib import openai_client
from covergen.lib.imaging import decode_image_b64
from covergen.logger import get_logger

log = get_logger(__name__)

# OpenAI-style size presets; non-native ratios map to the nearest square/portrait size
SIZE_FOR_ASPECT_RATIO: Dict[str, str] = {
    "1:1": "1024x1024",
    "9:16": "1024x1792",
    "16:9": "1792x1024",
    "3:2": "1024x1024",
    "2:3": "1024x1792",
    "4:3": "1024x1024",
    "3:4": "1024x1792",
}

HD_PLATFORMS = {"taobao", "wechat"}


@dataclass
class ProviderImage:
    """A provider returns either a downloadable URL or the raw image bytes."""
    url: Optional[str] = None
    data: Optional[bytes] = None


def size_for_aspect_ratio(aspect_ratio: str) -> str:
    return SIZE_FOR_ASPECT_RATIO.get(aspect_ratio, "1024x1024")


def _require_key(model: ImageModel) -> str:
    key = api_key_for(model.api_key_env)
    if not key:
        raise RuntimeError(f"API key not configured: {model.api_key_env}")
    return key


def generate_openai_compatible(model: ImageModel, prompt: str, *, aspect_ratio: str, platform_id: str) -> ProviderImage:
    client = openai_client.compatible_client(_require_key(model), model.base_url)

    kwargs: Dict[str, Any] = {
        "model": model.model,
        "prompt": prompt,
        "n": 1,
        "quality": "hd" if platform_id in HD_PLATFORMS else "standard",
    }
    extra_body: Dict[str, Any] = dict(model.extra_params)
    if model.aspect_ratios:
        extra_body["aspect_ratio"] = aspect_ratio
    else:
        kwargs["size"] = size_for_aspect_ratio(aspect_ratio)
    if extra_body:
        kwargs["extra_body"] = extra_body

    log.debug(f"images.generate model={model.model} base={model.base_url} ratio={aspect_ratio} prompt_len={len(prompt)}")
    resp = client.images.generate(**kwargs)
    if not resp.data:
        raise RuntimeError(f"{model.id} returned no images")
    item = resp.data[0]
    if getattr(item, "url", None):
        return ProviderImage(url=item.url)
    if getattr(item, "b64_json", None):
        return ProviderImage(data=decode_image_b64(item.b64_json))
    raise RuntimeError(f"{model.id} returned neither url nor b64_json")


def generate_gemini(model: ImageModel, prompt: str, *, aspect_ratio: str) -> ProviderImage:
    from google import genai
    from google.genai import types

    client = genai.Client(api_key=_require_key(model))
    image_config = types.ImageConfig(aspect_ratio=aspect_ratio)
    if model.max_resolution:
        image_config = types.ImageConfig(aspect_ratio=aspect_ratio, image_size=model.max_resolution)

    resp = client.models.generate_content(
        model=model.model,
        contents=[prompt],
        config=types.GenerateContentConfig(
            response_modalities=["image", "text"],
            image_config=image_config,
        ),
    )

    for cand in getattr(resp, "candidates", []) or []:
        content = getattr(cand, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if not inline or not getattr(inline, "data", None):
                continue
            mime = getattr(inline, "mime_type", None) or ""
            if mime and not mime.startswith("image/"):
                continue
            return ProviderImage(data=inline.data)
    raise RuntimeError(f"{model.id} returned no image data")


def generate_replicate(model: ImageModel, prompt: str, *, width: int, height: int) -> ProviderImage:
    import replicate

    client = replicate.Client(api_token=_require_key(model))
    output = client.run(
        model.model,
        input={
            "prompt": prompt,
            "width": width,
            "height": height,
            "num_inference_steps": 30,
            "guidance_scale": 7.5,
        },
    )
    if isinstance(output, (list, tuple)):
        output = output[0] if output else None
    if not output:
        raise RuntimeError("Replicate returned no images")
    if hasattr(output, "read"):
        return ProviderImage(data=output.read())
    return ProviderImage(url=str(output))


def generate_with_model(model: ImageModel, prompt: str, *, aspect_ratio: str, platform_id: str, width: int, height: int) -> ProviderImage:
    if model.provider == OPENAI_COMPATIBLE:
        return generate_openai_compatible(model, prompt, aspect_ratio=aspect_ratio, platform_id=platform_id)
    if model.provider == GEMINI:
        return generate_gemini(model, prompt, aspect_ratio=aspect_ratio)
    if model.provider == REPLICATE:
        return generate_replicate(model, prompt, width=width, height=height)
    raise RuntimeError(f"Unsupported provider type: {model.provider}")
