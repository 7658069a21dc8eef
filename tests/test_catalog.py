# tests/test_catalog.py
from covergen.features.platforms.service import (
    get_platform_generation_order,
    validate_multi_platform_request,
    validate_platform_dimensions,
)
from covergen.lib.cache import CacheFactory


def test_list_platforms(client):
    resp = client.get("/api/platforms")
    assert resp.status_code == 200
    ids = [p["id"] for p in resp.json()["data"]]
    assert "xiaohongshu" in ids and "bilibili" in ids


def test_platforms_by_category(client):
    data = client.get("/api/platforms", params={"category": "ecommerce"}).json()["data"]
    assert {p["id"] for p in data} == {"taobao", "taobao-banner"}


def test_platform_detail_and_missing(client):
    data = client.get("/api/platforms/douyin").json()["data"]
    assert data["dimensions"] == {"width": 720, "height": 1280}
    assert data["aspect_ratio"] == "9:16"
    assert client.get("/api/platforms/myspace").status_code == 404


def test_platform_helpers():
    assert validate_platform_dimensions("taobao", 800, 800)
    assert not validate_platform_dimensions("taobao", 800, 600)
    assert not validate_platform_dimensions("unknown", 1, 1)
    assert get_platform_generation_order(["douyin", "xiaohongshu", "custom"]) == ["xiaohongshu", "douyin", "custom"]
    errors = validate_multi_platform_request("short", ["weibo", "weibo", "nope"])
    assert "Duplicate platforms specified" in errors
    assert "Platform nope is not supported" in errors
    assert "Text must be at least 10 characters long" in errors


def test_templates(client):
    data = client.get("/api/templates").json()["data"]
    assert len(data) == 10
    bold = client.get("/api/templates", params={"category": "bold"}).json()["data"]
    assert all(t["category"] == "bold" for t in bold)


def test_template_detail_is_cached(client):
    first = client.get("/api/templates/tech-blue").json()
    assert first["data"]["background_color"] == "#0F2027"
    assert first["meta"]["cached"] is False
    second = client.get("/api/templates/tech-blue").json()
    assert second["meta"]["cached"] is True
    assert "template:v1:tech-blue" in CacheFactory.get_instance("templates").keys()


def test_template_missing(client):
    assert client.get("/api/templates/nope").status_code == 404


def test_visual_styles_hide_prompt(client):
    data = client.get("/api/visual-styles").json()["data"]
    assert data
    assert all("prompt_fragment" not in s for s in data)
    orders = [s["sort_order"] for s in data]
    assert orders == sorted(orders)


def test_models_lists_configured_providers(client):
    data = client.get("/api/models").json()["data"]
    assert [m["id"] for m in data["models"]] == ["openai/dall-e-3", "openai/dall-e-2"]
    assert data["default_model_id"] == "openai/dall-e-3"


def test_models_prefers_default_channel(client, monkeypatch):
    monkeypatch.setenv("LAOZHANG_API_KEY", "lz")
    monkeypatch.setenv("GOOGLE_AI_API_KEY", "g")
    data = client.get("/api/models").json()["data"]
    ids = [m["id"] for m in data["models"]]
    assert data["default_model_id"] == "laozhang/gemini-3-pro-image-preview"
    # same display name offered twice: only the higher-priority channel is listed
    assert "google/gemini-3-pro-image-preview" not in ids
    assert ids[0] == "laozhang/gemini-3-pro-image-preview"
