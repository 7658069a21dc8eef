# covergen/features/models/registry.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from covergen.config import api_key_for
from covergen.lib.errors import AIProviderError

OPENAI_COMPATIBLE = "openai-compatible"
GEMINI = "gemini"
REPLICATE = "replicate"

_LAOZHANG = "https://api.laozhang.ai/v1"
_OPENAI = "https://api.openai.com/v1"
_GOOGLE = "https://generativelanguage.googleapis.com"
_REPLICATE = "https://api.replicate.com"


@dataclass(frozen=True)
class ImageModel:
    id: str
    name: str
    provider: str                       # openai-compatible | gemini | replicate
    base_url: str
    api_key_env: str
    model: str
    display_provider: str = ""
    aspect_ratios: Tuple[str, ...] = ()
    sizes: Tuple[str, ...] = ()
    max_resolution: Optional[str] = None
    extra_params: Dict[str, Any] = field(default_factory=dict)
    priority: int = 100                 # lower wins
    is_default: bool = False
    fallback_to: Optional[str] = None


_FLUX_RATIOS = ("1:1", "2:3", "3:2", "4:3", "3:4", "16:9", "9:16", "21:9", "5:4", "4:5")

IMAGE_MODELS: List[ImageModel] = [
    ImageModel(
        id="laozhang/gemini-3-pro-image-preview", name="Nano Banana Pro", provider=OPENAI_COMPATIBLE,
        display_provider="google", base_url=_LAOZHANG, api_key_env="LAOZHANG_API_KEY",
        model="gemini-3-pro-image-preview", aspect_ratios=("1:1", "16:9", "9:16", "4:3", "3:4"),
        priority=0, is_default=True, fallback_to="laozhang/flux-kontext-pro",
    ),
    ImageModel(
        id="laozhang/flux-kontext-pro", name="Flux Kontext Pro", provider=OPENAI_COMPATIBLE,
        display_provider="flux", base_url=_LAOZHANG, api_key_env="LAOZHANG_API_KEY",
        model="flux-kontext-pro", aspect_ratios=_FLUX_RATIOS + ("16:10", "3:7", "7:3"),
        extra_params={"prompt_upsampling": True, "safety_tolerance": 2},
        priority=1, fallback_to="google/gemini-3-pro-image-preview",
    ),
    ImageModel(
        id="laozhang/gpt-4o-image", name="GPT-4o Image", provider=OPENAI_COMPATIBLE,
        display_provider="openai", base_url=_LAOZHANG, api_key_env="LAOZHANG_API_KEY",
        model="gpt-4o-image", sizes=("1024x1024", "1024x1792", "1792x1024"),
        priority=2, fallback_to="openai/dall-e-3",
    ),
    ImageModel(
        id="laozhang/flux-kontext-max", name="Flux Kontext Max", provider=OPENAI_COMPATIBLE,
        display_provider="flux", base_url=_LAOZHANG, api_key_env="LAOZHANG_API_KEY",
        model="flux-kontext-max", aspect_ratios=_FLUX_RATIOS,
        extra_params={"prompt_upsampling": True, "safety_tolerance": 2},
        priority=3, fallback_to="laozhang/flux-kontext-pro",
    ),
    ImageModel(
        id="laozhang/gemini-2.5-flash-image", name="Nano Banana", provider=OPENAI_COMPATIBLE,
        display_provider="google", base_url=_LAOZHANG, api_key_env="LAOZHANG_API_KEY",
        model="gemini-2.5-flash-image", aspect_ratios=("1:1", "16:9", "9:16"),
        priority=4, fallback_to="laozhang/flux-kontext-pro",
    ),
    ImageModel(
        id="google/gemini-3-pro-image-preview", name="Nano Banana Pro", provider=GEMINI,
        display_provider="google", base_url=_GOOGLE, api_key_env="GOOGLE_AI_API_KEY",
        model="gemini-3-pro-image-preview", aspect_ratios=("1:1", "16:9", "9:16", "4:3", "3:4"),
        max_resolution="4K", priority=5, is_default=True, fallback_to="laozhang/flux-kontext-pro",
    ),
    ImageModel(
        id="google/gemini-2.5-flash-image", name="Nano Banana", provider=GEMINI,
        display_provider="google", base_url=_GOOGLE, api_key_env="GOOGLE_AI_API_KEY",
        model="gemini-2.5-flash-image", aspect_ratios=("1:1", "16:9", "9:16"),
        priority=6, fallback_to="laozhang/flux-kontext-pro",
    ),
    ImageModel(
        id="openai/dall-e-3", name="DALL-E 3", provider=OPENAI_COMPATIBLE,
        display_provider="openai", base_url=_OPENAI, api_key_env="OPENAI_API_KEY",
        model="dall-e-3", sizes=("1024x1024", "1024x1792", "1792x1024"), priority=10,
    ),
    ImageModel(
        id="openai/dall-e-2", name="DALL-E 2", provider=OPENAI_COMPATIBLE,
        display_provider="openai", base_url=_OPENAI, api_key_env="OPENAI_API_KEY",
        model="dall-e-2", sizes=("256x256", "512x512", "1024x1024"),
        priority=15, fallback_to="openai/dall-e-3",
    ),
    ImageModel(
        id="replicate/stable-diffusion", name="Stable Diffusion XL", provider=REPLICATE,
        display_provider="stability", base_url=_REPLICATE, api_key_env="REPLICATE_API_TOKEN",
        model="stability-ai/stable-diffusion:ac732df83cea7fff18b8472768c88ad041fa750ff7682a21affe81863cbe77e4",
        aspect_ratios=("1:1",), sizes=("1024x1024",), priority=20,
    ),
]

_BY_ID: Dict[str, ImageModel] = {m.id: m for m in IMAGE_MODELS}


def get_model(model_id: str) -> Optional[ImageModel]:
    return _BY_ID.get(model_id)


def is_available(model: ImageModel) -> bool:
    return bool(api_key_for(model.api_key_env))


def get_available_models() -> List[ImageModel]:
    return sorted((m for m in IMAGE_MODELS if is_available(m)), key=lambda m: m.priority)


def get_default_model() -> ImageModel:
    available = get_available_models()
    for m in available:
        if m.is_default:
            return m
    if available:
        return available[0]
    raise AIProviderError("No image generation model is available: configure at least one provider API key")


def to_public_info(model: ImageModel) -> Dict[str, Any]:
    return {
        "id": model.id,
        "name": model.name,
        "provider": model.display_provider or model.provider,
        "aspect_ratios": list(model.aspect_ratios),
        "sizes": list(model.sizes),
        "max_resolution": model.max_resolution,
        "is_default": model.is_default,
        "priority": model.priority,
    }
