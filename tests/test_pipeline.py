# tests/test_pipeline.py
import pytest

from covergen.features.creative_director.schemas import DirectorOutput, TitleSuggestion
from covergen.features.generate.schemas import GenerateCoverRequest
from covergen.features.image_generator.service import GeneratedCover
from covergen.features.pipeline.service import CoverPipeline
from covergen.lib.errors import AIProviderError, NotFoundError

from tests.conftest import DIRECTOR_BRIEF


class _FakeDirector:
    def __init__(self, fallback=False):
        self.fallback = fallback
        self.calls = []

    def analyze(self, *, user_content, platform, visual_style_prompt=None):
        self.calls.append((platform.id, visual_style_prompt))
        return DirectorOutput(
            full_text=DIRECTOR_BRIEF,
            title_suggestions=[TitleSuggestion(text=f"Title for {platform.id}", confidence=1.0)],
            fallback=self.fallback,
        )


class _FakeImageGenerator:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    def generate_image(self, *, title, platform, template, model_id=None, visual_style_prompt=None, external_image_prompt=None):
        self.calls.append({"platform": platform.id, "title": title, "template": template.id, "style": visual_style_prompt})
        if platform.id in self.failing:
            raise AIProviderError(f"no image for {platform.id}")
        return GeneratedCover(
            image_url=f"http://cdn/{platform.id}.webp",
            thumbnail_url=f"http://cdn/{platform.id}-thumb.webp",
            file_size=1234,
            format="webp",
            width=platform.dimensions.width,
            height=platform.dimensions.height,
            model_id="openai/dall-e-3",
        )


def _request(**overrides):
    body = {
        "text": "How I redesigned my tiny balcony garden on a budget.",
        "platforms": ["xiaohongshu", "weibo", "bilibili"],
        "style_template": "nature-fresh",
    }
    body.update(overrides)
    return GenerateCoverRequest(**body)


def test_platform_failure_is_isolated():
    images = _FakeImageGenerator(failing={"weibo"})
    pipeline = CoverPipeline(director=_FakeDirector(), image_generator=images)

    results = pipeline.execute(_request())
    assert [r["platform_id"] for r in results] == ["xiaohongshu", "weibo", "bilibili"]
    assert [r["status"] for r in results] == ["completed", "failed", "completed"]
    assert results[1]["error"] == "no image for weibo"
    assert results[0]["title"] == "Title for xiaohongshu"
    assert results[2]["metadata"]["dimensions"] == {"width": 1920, "height": 1080}
    assert len(images.calls) == 3


def test_progress_reports_start_and_finish():
    seen = []
    pipeline = CoverPipeline(director=_FakeDirector(), image_generator=_FakeImageGenerator())
    pipeline.execute_with_progress(_request(platforms=["zhihu"]), lambda step, p: seen.append((step, p)))

    assert seen[0] == ("Starting", 0)
    assert seen[-1] == ("Completed", 100)
    assert ("Analyzing content for Zhihu", 10) in seen
    assert ("Generating image for Zhihu", 45) in seen
    assert ("Image generated for Zhihu", 90) in seen
    assert all(0 <= p <= 100 for _, p in seen)


def test_unknown_template_fails_the_whole_run():
    pipeline = CoverPipeline(director=_FakeDirector(), image_generator=_FakeImageGenerator())
    with pytest.raises(NotFoundError):
        pipeline.execute(_request(style_template="missing"))


def test_visual_style_is_passed_through_and_unknown_ignored():
    director = _FakeDirector()
    images = _FakeImageGenerator()
    pipeline = CoverPipeline(director=director, image_generator=images)

    pipeline.execute(_request(platforms=["taobao"], visual_style_id="realistic-food"))
    assert "food photography" in director.calls[0][1]
    assert "food photography" in images.calls[0]["style"]

    pipeline.execute(_request(platforms=["douyin"], visual_style_id="no-such-style"))
    assert director.calls[1] == ("douyin", None)


def test_director_briefs_are_cached():
    director = _FakeDirector()
    pipeline = CoverPipeline(director=director, image_generator=_FakeImageGenerator())
    pipeline.execute(_request(platforms=["weibo"]))
    pipeline.execute(_request(platforms=["weibo"]))
    assert len(director.calls) == 1


def test_fallback_briefs_are_not_cached():
    director = _FakeDirector(fallback=True)
    pipeline = CoverPipeline(director=director, image_generator=_FakeImageGenerator())
    pipeline.execute(_request(platforms=["weibo"]))
    pipeline.execute(_request(platforms=["weibo"]))
    assert len(director.calls) == 2


def test_response_cache_can_be_disabled():
    director = _FakeDirector()
    pipeline = CoverPipeline(director=director, image_generator=_FakeImageGenerator(), use_response_cache=False)
    pipeline.execute(_request(platforms=["weibo"]))
    pipeline.execute(_request(platforms=["weibo"]))
    assert len(director.calls) == 2
