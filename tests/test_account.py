# tests/test_account.py
import pytest

from covergen.features.account.service import COVER_GENERATION, check_quota, quota_for, record_usage
from covergen.lib.errors import RateLimitError
from covergen.lib.store import store

USER = {"X-User-Id": "writer-1"}


def test_new_user_gets_free_quota():
    quota = quota_for("fresh")
    assert quota["limit"] == 10
    assert quota["used"] == 0
    assert quota["remaining"] == 10
    assert quota["reset_at"].day == 1


def test_check_quota_raises_when_exhausted():
    record_usage("heavy", COVER_GENERATION, 10)
    with pytest.raises(RateLimitError) as exc:
        check_quota("heavy")
    assert exc.value.code == "QUOTA_EXCEEDED"
    assert "10/10" in exc.value.message


def test_enterprise_is_unlimited():
    store.ensure_subscription("big").plan_type = "ENTERPRISE"
    record_usage("big", COVER_GENERATION, 5000)
    quota = check_quota("big")
    assert quota["limit"] == -1
    assert quota["remaining"] == -1


def test_record_usage_ignores_zero():
    assert record_usage("u", COVER_GENERATION, 0) is None
    assert store.usage == []


def test_subscription_requires_user(client):
    assert client.get("/api/user/subscription").status_code == 401


def test_subscription_endpoint(client):
    record_usage("writer-1", COVER_GENERATION, 3)
    data = client.get("/api/user/subscription", headers=USER).json()["data"]
    assert data["subscription"]["plan_type"] == "FREE"
    assert data["subscription"]["status"] == "ACTIVE"
    assert data["quota"]["used"] == 3
    assert data["quota"]["remaining"] == 7


def test_usage_endpoint_summarises_month(client):
    record_usage("writer-1", COVER_GENERATION, 2, {"job_id": "j1"})
    record_usage("writer-1", "API_CALL", 1)
    data = client.get("/api/user/usage", headers=USER).json()["data"]
    assert data["total"] == 2
    assert data["summary"] == {"COVER_GENERATION": 2, "API_CALL": 1}
    assert len(data["month"]) == 7

    previous = client.get("/api/user/usage", params={"month": 1}, headers=USER).json()["data"]
    assert previous["total"] == 0


def test_generate_is_refused_over_quota(client):
    record_usage("writer-1", COVER_GENERATION, 10)
    resp = client.post(
        "/api/generate",
        json={"text": "Quarterly newsletter for our readers.", "platforms": ["weibo"], "style_template": "tech-blue"},
        headers=USER,
    )
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "QUOTA_EXCEEDED"
