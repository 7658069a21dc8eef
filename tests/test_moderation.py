# tests/test_moderation.py
from covergen.features.moderate.schemas import CATEGORIES, ModerationResult
from covergen.features.moderate.service import (
    UNAVAILABLE_REASON,
    is_blocking,
    is_content_safe,
    moderate_text,
)

from tests.conftest import FLAG_WORD, REWRITE_TEXT


def _result(flagged, **hits):
    return ModerationResult(flagged=flagged, categories={c: hits.get(c, False) for c in CATEGORIES})


def test_moderate_text_maps_categories(openai_calls):
    result = moderate_text(f"you are a {FLAG_WORD}")
    assert result.flagged is True
    assert result.categories["harassment"] is True
    assert result.category_scores["harassment"] == 0.97
    assert set(result.categories) == set(CATEGORIES)
    assert openai_calls[-1][1]["model"] == "omni-moderation-latest"


def test_moderation_fails_closed(monkeypatch):
    from covergen.lib import openai_client

    def _down(**kwargs):
        raise RuntimeError("timeout")

    monkeypatch.setattr(openai_client.client.moderations, "create", _down)
    result = moderate_text("anything")
    assert result.flagged is True
    assert result.reason == UNAVAILABLE_REASON
    safe, reason = is_content_safe("anything")
    assert safe is False
    assert UNAVAILABLE_REASON in reason


def test_is_blocking_rules():
    mild = _result(True, violence=True)
    assert is_blocking(mild) is False
    assert is_blocking(mild, strict=True) is True
    assert is_blocking(_result(True, hate=True)) is True
    assert is_blocking(_result(False)) is False


def test_moderate_endpoint_safe(client):
    resp = client.post("/api/moderate", json={"content": "Lovely sunny day at the beach"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["safe"] is True
    assert data["reason"] is None
    assert data["alternative"] is None


def test_moderate_endpoint_flagged_offers_alternative(client):
    resp = client.post("/api/moderate", json={"content": f"what a {FLAG_WORD}"})
    data = resp.json()["data"]
    assert data["safe"] is False
    assert data["flagged"] is True
    assert "harassment" in data["reason"]
    assert data["alternative"] == REWRITE_TEXT


def test_moderate_endpoint_strict_has_no_alternative(client):
    resp = client.post("/api/moderate", json={"content": f"what a {FLAG_WORD}", "strict": True})
    assert resp.json()["data"]["alternative"] is None


def test_moderate_endpoint_batch(client):
    resp = client.post("/api/moderate", json={"content": "hello there", "batch": True})
    data = resp.json()["data"]
    assert data["safe"] is True
    assert len(data["results"]) == 1


def test_moderate_get_requires_content(client):
    resp = client.get("/api/moderate")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_moderate_get(client):
    resp = client.get("/api/moderate", params={"content": f"so {FLAG_WORD}"})
    assert resp.json()["data"]["safe"] is False


def test_moderate_rejects_empty_content(client):
    assert client.post("/api/moderate", json={"content": ""}).status_code == 400
