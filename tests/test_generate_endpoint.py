# tests/test_generate_endpoint.py
import dataclasses

import covergen.features.generate.router as generate_routes
from covergen.config import config
from covergen.features.image_generator import service as image_service
from covergen.features.image_generator.service import ImageGenerator
from covergen.lib.jobs import COMPLETED, PENDING, jobs

from tests.conftest import FLAG_WORD

TEXT = "A weekend hiking trip through the misty mountains with friends."


def _payload(**overrides):
    body = {
        "text": TEXT,
        "platforms": ["xiaohongshu", "wechat"],
        "style_template": "minimal-clean",
        "model_id": "openai/dall-e-3",
    }
    body.update(overrides)
    return body


def test_generate_runs_job_to_completion(client):
    resp = client.post("/api/generate", json=_payload())
    assert resp.status_code == 202
    body = resp.json()
    assert body["success"] is True
    job_id = body["data"]["job_id"]
    assert body["meta"]["request_id"]

    # background task has already run when the test client returns
    status = client.get(f"/api/generate/{job_id}").json()["data"]
    assert status["status"] == "completed"
    assert status["progress"] == 100
    assert status["estimated_time_remaining"] == 0

    results = status["results"]
    assert [r["platform_id"] for r in results] == ["xiaohongshu", "wechat"]
    for r in results:
        assert r["status"] == "completed"
        assert r["image_url"].startswith(f"http://testserver/api/storage/covers/{r['platform_id']}/")
        assert r["image_url"].endswith(".webp")
        assert r["title"] == "Weekend Trails Await 🌲"
        assert r["metadata"]["format"] == "webp"
        assert r["metadata"]["model_id"] == "openai/dall-e-3"


def test_generated_image_is_served_by_storage_proxy(client):
    job_id = client.post("/api/generate", json=_payload(platforms=["taobao"])).json()["data"]["job_id"]
    url = jobs.get(job_id).results[0]["image_url"]

    resp = client.get(url.replace("http://testserver", ""))
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/webp"
    assert "immutable" in resp.headers["cache-control"]


def test_generate_rejects_unknown_platform(client):
    resp = client.post("/api/generate", json=_payload(platforms=["myspace"]))
    assert resp.status_code == 400
    err = resp.json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert "myspace" in err["message"]
    assert jobs.count() == 0


def test_generate_rejects_duplicate_platforms(client):
    resp = client.post("/api/generate", json=_payload(platforms=["weibo", "weibo"]))
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_generate_rejects_unknown_template(client):
    resp = client.post("/api/generate", json=_payload(style_template="no-such-template"))
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["field"] == "style_template"


def test_generate_rejects_short_text(client):
    resp = client.post("/api/generate", json=_payload(text="too short"))
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_generate_blocks_flagged_content(client):
    resp = client.post("/api/generate", json=_payload(text=f"This post contains {FLAG_WORD} words."))
    assert resp.status_code == 400
    err = resp.json()["error"]
    assert err["code"] == "CONTENT_FLAGGED"
    assert err["details"]["categories"]["harassment"] is True
    assert jobs.count() == 0


def test_moderation_bypass_header(client, monkeypatch):
    monkeypatch.setattr(generate_routes, "config", dataclasses.replace(config, moderation_bypass_key="letmein"))
    resp = client.post(
        "/api/generate",
        json=_payload(text=f"This post contains {FLAG_WORD} words.", platforms=["zhihu"]),
        headers={"X-Moderation-Bypass": "letmein"},
    )
    assert resp.status_code == 202


def test_all_platforms_failing_marks_job_failed(client, monkeypatch, no_sleep):
    from covergen.lib import openai_client

    def _broken(**kwargs):
        raise RuntimeError("provider down")

    monkeypatch.setattr(openai_client.client.images, "generate", _broken)
    delays, sleep = no_sleep
    monkeypatch.setattr(image_service, "_instance", ImageGenerator(sleep=sleep))

    job_id = client.post("/api/generate", json=_payload(platforms=["douyin"])).json()["data"]["job_id"]
    data = client.get(f"/api/generate/{job_id}").json()["data"]
    assert data["status"] == "failed"
    assert data["results"][0]["status"] == "failed"
    assert "provider down" in data["results"][0]["error"]
    assert "douyin" in data["error"]
    assert delays == [1.0, 2.0]


def test_job_status_unknown(client):
    resp = client.get("/api/generate/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


def test_list_jobs_filters_and_paginates(client):
    for i in range(3):
        jobs.create({"text": f"job {i}"})
    done = jobs.create({"text": "finished"})
    jobs.update(done.id, status=COMPLETED, progress=100)

    data = client.get("/api/generate", params={"limit": 2}).json()["data"]
    assert len(data["items"]) == 2
    assert data["pagination"]["total"] == 4
    assert data["pagination"]["has_next"] is True

    pending = client.get("/api/generate", params={"status": PENDING}).json()["data"]
    assert pending["pagination"]["total"] == 3
    assert all(j["status"] == "pending" for j in pending["items"])


def test_delete_job(client):
    job = jobs.create({"text": "finished"})
    jobs.update(job.id, status=COMPLETED)

    resp = client.delete(f"/api/generate/{job.id}")
    assert resp.status_code == 200
    assert client.get(f"/api/generate/{job.id}").status_code == 404


def test_delete_active_job_is_rejected(client):
    job = jobs.create({"text": "still queued"})
    resp = client.delete(f"/api/generate/{job.id}")
    assert resp.status_code == 400
    assert jobs.get(job.id) is not None


def test_worker_endpoint_is_idempotent(client):
    job = jobs.create(_payload(platforms=["weibo"]))

    first = client.post(f"/api/tasks/worker/generate/{job.id}").json()
    assert first == {"job_id": job.id, "ok": True, "status": "completed"}
    results = list(jobs.get(job.id).results)

    second = client.post(f"/api/tasks/worker/generate/{job.id}").json()
    assert second["status"] == "completed"
    assert jobs.get(job.id).results == results


def test_worker_endpoint_unknown_job(client):
    resp = client.post("/api/tasks/worker/generate/missing")
    assert resp.status_code == 200
    assert resp.json()["ok"] is False


def test_generate_records_usage_for_signed_in_user(client):
    headers = {"X-User-Id": "user-1"}
    client.post("/api/generate", json=_payload(), headers=headers)

    quota = client.get("/api/user/subscription", headers=headers).json()["data"]["quota"]
    assert quota["used"] == 2
    assert quota["limit"] == 10
    assert quota["remaining"] == 8
