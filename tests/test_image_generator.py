# tests/test_image_generator.py
import pytest

from covergen.features.image_generator import service as image_service
from covergen.features.image_generator.providers import ProviderImage
from covergen.features.image_generator.service import ImageGenerator, extract_image_prompt
from covergen.features.models.registry import get_model
from covergen.features.platforms.service import get_platform
from covergen.features.templates.service import get_style_template
from covergen.lib.errors import AIProviderError, NotFoundError, ValidationError

from tests.conftest import DIRECTOR_BRIEF, tiny_png_bytes


def test_extract_image_prompt_from_brief():
    prompt = extract_image_prompt(DIRECTOR_BRIEF, "oil painting")
    assert prompt.startswith("A sunlit mountain trail at dawn")
    assert "oil painting" in prompt
    assert "[STYLE_PLACEHOLDER]" not in prompt
    assert "[TITLE SUGGESTIONS]" not in prompt


def test_extract_image_prompt_stops_at_next_section():
    text = "[IMAGE PROMPT]\nneon city   at night\n[TITLE SUGGESTIONS]\n1. Hello"
    assert extract_image_prompt(text) == "neon city at night"


def test_extract_image_prompt_without_marker_uses_whole_text():
    assert extract_image_prompt("  a cat on a\t\tsofa ") == "a cat on a sofa"


def test_extract_image_prompt_drops_placeholder_without_style():
    text = "[IMAGE PROMPT]\nforest path, [STYLE_PLACEHOLDER]"
    assert extract_image_prompt(text) == "forest path,"


@pytest.mark.parametrize("text", [None, "", "   "])
def test_extract_image_prompt_requires_text(text):
    with pytest.raises(ValidationError):
        extract_image_prompt(text)


def test_resolve_unknown_model():
    with pytest.raises(NotFoundError):
        ImageGenerator().resolve_model("acme/painter")


def test_default_model_with_only_openai_key():
    assert ImageGenerator().resolve_model(None).id == "openai/dall-e-3"


def _recording_provider(monkeypatch, failing):
    calls = []

    def _fake(model, prompt, **kwargs):
        calls.append(model.id)
        if model.id in failing:
            raise RuntimeError(f"{model.id} unavailable")
        return ProviderImage(data=tiny_png_bytes())

    monkeypatch.setattr(image_service, "generate_with_model", _fake)
    return calls


def test_fallback_chain_after_retries(monkeypatch, no_sleep):
    calls = _recording_provider(monkeypatch, failing={"laozhang/gpt-4o-image"})
    delays, sleep = no_sleep
    gen = ImageGenerator(sleep=sleep)

    image = gen.generate_with_fallback("prompt", get_model("laozhang/gpt-4o-image"), get_platform("weibo"))
    assert image.data
    assert calls == ["laozhang/gpt-4o-image"] * 3 + ["openai/dall-e-3"]
    assert delays == [1.0, 2.0]


def test_fallback_chain_stops_on_cycle(monkeypatch, no_sleep):
    calls = _recording_provider(
        monkeypatch,
        failing={"laozhang/flux-kontext-pro", "google/gemini-3-pro-image-preview"},
    )
    delays, sleep = no_sleep
    gen = ImageGenerator(sleep=sleep)

    with pytest.raises(AIProviderError):
        gen.generate_with_fallback("prompt", get_model("laozhang/flux-kontext-pro"), get_platform("weibo"))
    assert calls == ["laozhang/flux-kontext-pro"] * 3 + ["google/gemini-3-pro-image-preview"] * 3


def test_generate_image_saves_webp_and_caches(monkeypatch):
    calls = _recording_provider(monkeypatch, failing=set())
    gen = ImageGenerator(sleep=lambda s: None)
    kwargs = dict(
        title="Weekend Trails",
        platform=get_platform("wechat"),
        template=get_style_template("tech-blue"),
        model_id="openai/dall-e-3",
        external_image_prompt=DIRECTOR_BRIEF,
    )

    cover = gen.generate_image(**kwargs)
    assert cover.format == "webp"
    assert cover.image_url.startswith("http://testserver/api/storage/covers/wechat/")
    assert cover.thumbnail_url == cover.image_url
    assert cover.width <= 900 and cover.height <= 500
    assert cover.file_size > 0

    again = gen.generate_image(**kwargs)
    assert again == cover
    assert len(calls) == 1


def test_generate_image_wraps_unexpected_errors(monkeypatch):
    def _bad_bytes(model, prompt, **kwargs):
        return ProviderImage(data=b"not an image")

    monkeypatch.setattr(image_service, "generate_with_model", _bad_bytes)
    with pytest.raises(AIProviderError):
        ImageGenerator().generate_image(
            title="x",
            platform=get_platform("taobao"),
            template=get_style_template("minimal-clean"),
            model_id="openai/dall-e-3",
            external_image_prompt="[IMAGE PROMPT]\nred apple",
        )


def test_openai_compatible_request_shape(openai_calls):
    gen = ImageGenerator(sleep=lambda s: None)
    gen.generate_image(
        title="Shop sale",
        platform=get_platform("taobao"),
        template=get_style_template("modern-bold"),
        model_id="openai/dall-e-3",
        external_image_prompt="[IMAGE PROMPT]\nred apple on a table",
    )
    endpoint, kwargs = next(c for c in openai_calls if c[0] == "images")
    assert kwargs["model"] == "dall-e-3"
    assert kwargs["prompt"] == "red apple on a table"
    assert kwargs["size"] == "1024x1024"
    assert kwargs["quality"] == "hd"
    assert "extra_body" not in kwargs
