# tests/test_rate_limit.py
from covergen.lib.rate_limit import ENDPOINT_LIMITS, FixedWindowRateLimiter


class _Clock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_fixed_window_counts_and_blocks():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    first = limiter.check("ip")
    assert first.allowed and first.remaining == 1 and first.total_hits == 1
    assert limiter.check("ip").allowed
    blocked = limiter.check("ip")
    assert not blocked.allowed
    assert blocked.remaining == 0
    assert blocked.retry_after == 60
    assert blocked.headers()["Retry-After"] == "60"
    assert blocked.headers()["X-RateLimit-Reset"] == "1060"


def test_window_resets_after_expiry():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(limit=1, window_seconds=60, clock=clock)
    limiter.check("ip")
    assert not limiter.check("ip").allowed

    clock.now += 60
    again = limiter.check("ip")
    assert again.allowed
    assert again.total_hits == 1


def test_identifiers_are_independent():
    limiter = FixedWindowRateLimiter(limit=1, clock=_Clock())
    assert limiter.check("a").allowed
    assert limiter.check("b").allowed
    assert not limiter.check("a").allowed


def test_cleanup_drops_expired_windows():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(limit=5, window_seconds=10, clock=clock)
    limiter.check("a")
    limiter.check("b")
    clock.now += 11
    assert limiter.cleanup() == 2


def test_endpoint_limits():
    assert ENDPOINT_LIMITS == {
        "generate": 5, "moderate": 20, "analytics": 50, "templates": 30, "health": 100, "default": 10,
    }


def test_route_returns_429_with_headers(client):
    for i in range(10):
        resp = client.get("/api/platforms")
        assert resp.status_code == 200
        assert resp.headers["X-RateLimit-Remaining"] == str(9 - i)

    resp = client.get("/api/platforms")
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
    assert int(resp.headers["Retry-After"]) >= 1
    assert resp.headers["X-RateLimit-Limit"] == "10"


def test_forwarded_for_identifies_client(client):
    for _ in range(10):
        client.get("/api/models", headers={"X-Forwarded-For": "10.0.0.1"})
    assert client.get("/api/models", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert client.get("/api/models", headers={"X-Forwarded-For": "10.0.0.2, 10.0.0.1"}).status_code == 200


def test_check_prunes_expired_windows_once_per_window():
    clock = _Clock()
    limiter = FixedWindowRateLimiter(limit=5, window_seconds=10, clock=clock)
    for i in range(50):
        limiter.check(f"ip-{i}")
    assert len(limiter) == 50

    clock.now += 5
    limiter.check("late")
    assert len(limiter) == 51

    clock.now += 6
    limiter.check("fresh")
    assert len(limiter) == 2


def test_route_windows_do_not_accumulate(client, monkeypatch):
    from covergen.lib import rate_limit

    clock = _Clock()
    limiter = rate_limit.limiters["default"]
    monkeypatch.setattr(limiter, "_clock", clock)

    for i in range(200):
        resp = client.get("/api/platforms", headers={"X-Forwarded-For": f"10.1.{i // 250}.{i % 250}"})
        assert resp.status_code == 200
    assert len(limiter) == 200

    clock.now += 3600
    assert client.get("/api/platforms", headers={"X-Forwarded-For": "10.9.9.9"}).status_code == 200
    assert len(limiter) == 1


def test_error_responses_keep_rate_limit_headers(client):
    ok = client.get("/api/platforms/weibo")
    assert ok.status_code == 200
    assert ok.headers["X-RateLimit-Limit"] == "10"

    missing = client.get("/api/platforms/nope")
    assert missing.status_code == 404
    assert missing.json()["success"] is False
    assert missing.headers["X-RateLimit-Limit"] == "10"
    assert missing.headers["X-RateLimit-Remaining"] == "8"


def test_validation_errors_keep_rate_limit_headers(client):
    resp = client.post("/api/moderate", json={"content": ""})
    assert resp.status_code == 400
    assert resp.headers["X-RateLimit-Limit"] == "20"
