# tests/conftest.py
import base64
import io
import os
import types

import pytest
from PIL import Image

# Environment must be in place before covergen.config is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ["STORAGE_MODE"] = "local"
os.environ["JOB_DISPATCH"] = "inline"
os.environ["ENABLE_CONTENT_MODERATION"] = "true"
os.environ["CONTENT_MODERATION_STRICT"] = "false"
os.environ["APP_URL"] = "http://testserver"
for _name in (
    "LLM_PROVIDER",
    "VOLCENGINE_API_KEY",
    "ZHIPUAI_API_KEY",
    "GOOGLE_AI_API_KEY",
    "LAOZHANG_API_KEY",
    "REPLICATE_API_TOKEN",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "MODERATION_BYPASS_KEY",
    "LOG_FILE",
    "LOG_FORMAT",
):
    os.environ.pop(_name, None)

from fastapi.testclient import TestClient  # noqa: E402

from covergen.main import app  # noqa: E402
from covergen.features.creative_director.prompt import (  # noqa: E402
    IMAGE_PROMPT_MARKER,
    STYLE_PLACEHOLDER,
    SUMMARY_MARKER,
    TITLES_MARKER,
)
from covergen.features.analytics.service import tracker  # noqa: E402
from covergen.features.creative_director.service import reset_creative_director  # noqa: E402
from covergen.features.errors_log.service import error_log  # noqa: E402
from covergen.features.image_generator.service import reset_image_generator  # noqa: E402
from covergen.lib import rate_limit, storage  # noqa: E402
from covergen.lib.cache import CacheFactory  # noqa: E402
from covergen.lib.jobs import jobs  # noqa: E402
from covergen.lib.store import store  # noqa: E402

# -------- Test client --------
@pytest.fixture(scope="session")
def client():
    return TestClient(app)

# -------- Utilities --------
def tiny_png_bytes(size=(64, 48), color=(10, 120, 200)) -> bytes:
    im = Image.new("RGB", size, color)
    buf = io.BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


def tiny_png_base64() -> str:
    return base64.b64encode(tiny_png_bytes()).decode("ascii")


FLAG_WORD = "FLAGGED_WORD"
REWRITE_TEXT = "A friendly, family-safe version of the post."

DIRECTOR_BRIEF = f"""{SUMMARY_MARKER}
A weekend hiking trip through misty mountains.

{TITLES_MARKER}
1. Weekend Trails Await 🌲
2. Into the Mist ⛰️
3. Two Days, One Summit 🥾

{IMAGE_PROMPT_MARKER}
A sunlit mountain trail at dawn, hikers in the distance, soft fog, warm palette, {STYLE_PLACEHOLDER}, empty sky area for the title."""

# -------- Mocks for OpenAI --------
class _MockImageData:
    def __init__(self, b64_json):
        self.b64_json = b64_json
        self.url = None

class _MockImagesResponse:
    def __init__(self, b64_json):
        self.data = [_MockImageData(b64_json)]

class _MockMessage:
    def __init__(self, content: str):
        self.content = content

class _MockChoice:
    def __init__(self, content: str):
        self.message = _MockMessage(content)

class _MockChatResponse:
    def __init__(self, content: str):
        self.choices = [_MockChoice(content)]


def _moderation_response(text: str):
    from covergen.features.moderate.schemas import CATEGORIES

    flagged = FLAG_WORD in text
    categories = types.SimpleNamespace(**{c: (flagged and c == "harassment") for c in CATEGORIES})
    scores = types.SimpleNamespace(**{c: (0.97 if flagged and c == "harassment" else 0.01) for c in CATEGORIES})
    result = types.SimpleNamespace(flagged=flagged, categories=categories, category_scores=scores)
    return types.SimpleNamespace(results=[result])


@pytest.fixture
def openai_calls():
    """Records every mocked OpenAI call as (endpoint, kwargs)."""
    return []


@pytest.fixture(autouse=True)
def mock_openai(monkeypatch, openai_calls):
    """
    Auto-mock the OpenAI client everywhere so tests don't hit the network.
    """
    from covergen.lib import openai_client

    def _fake_images_generate(**kwargs):
        openai_calls.append(("images", kwargs))
        return _MockImagesResponse(tiny_png_base64())

    def _fake_chat_create(**kwargs):
        openai_calls.append(("chat", kwargs))
        system = kwargs["messages"][0]["content"]
        if "content moderator" in system:
            return _MockChatResponse(REWRITE_TEXT)
        return _MockChatResponse(DIRECTOR_BRIEF)

    def _fake_moderations_create(**kwargs):
        openai_calls.append(("moderations", kwargs))
        return _moderation_response(kwargs["input"])

    monkeypatch.setattr(openai_client.client.images, "generate", _fake_images_generate)
    monkeypatch.setattr(openai_client.client.chat.completions, "create", _fake_chat_create)
    monkeypatch.setattr(openai_client.client.moderations, "create", _fake_moderations_create)
    yield

# -------- Per-test state --------
@pytest.fixture(autouse=True)
def fresh_state(tmp_path):
    rate_limit.reset_all()
    CacheFactory.reset()
    store.reset()
    jobs.clear()
    error_log.clear()
    tracker.clear()
    reset_creative_director()
    reset_image_generator()
    storage.set_driver(storage.LocalDriver(tmp_path / "storage", base_url="http://testserver"))
    yield
    storage.set_driver(None)


@pytest.fixture
def no_sleep():
    """A sleep stand-in that records the requested delays."""
    delays = []
    return delays, delays.append
