import time
from unittest.mock import MagicMock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from revops import rate_limiter
from revops.utils.sanitization import escape_slack_text, strip_control_chars, truncate
from revops.webhook_security import (
    compute_hmac_sha256,
    compute_slack_signature,
    constant_time_compare,
    verify_timestamp,
)


@pytest.fixture
def fake_redis(monkeypatch):
    """Redis double with no stored windows; memory cache reset around each test."""
    client = MagicMock()
    client.get.return_value = None
    client.ttl.return_value = -2
    rate_limiter.memory_cache.clear()
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: client)
    yield client
    rate_limiter.memory_cache.clear()


@pytest.fixture
def limited_client(fake_redis, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
    app = FastAPI()
    limit = rate_limiter.create_rate_limiter(limit=2, window_seconds=60, key_prefix="test_limit")

    @app.get("/limited", dependencies=[Depends(limit)])
    def limited():
        return {"ok": True}

    return TestClient(app)


class TestCheckRateLimit:
    def test_allows_until_limit(self, fake_redis):
        results = [rate_limiter.check_rate_limit("k", 2, 60, fake_redis) for _ in range(3)]

        assert [r[0] for r in results] == [True, True, False]
        assert results[-1][1] == 2
        assert 0 < results[-1][2] <= 60

    def test_seeds_window_from_redis(self, fake_redis):
        fake_redis.get.return_value = "5"
        fake_redis.ttl.return_value = 30

        allowed, count, ttl = rate_limiter.check_rate_limit("seeded", 5, 60, fake_redis)

        assert allowed is False
        assert count == 5
        assert ttl <= 30

    def test_redis_read_failure_falls_back_to_memory(self, fake_redis):
        fake_redis.get.side_effect = ConnectionError("down")

        allowed, count, _ = rate_limiter.check_rate_limit("offline", 3, 60, fake_redis)

        assert allowed is True
        assert count == 1

    def test_first_request_is_written_to_redis(self, fake_redis):
        rate_limiter.check_rate_limit("fresh", 3, 60, fake_redis)
        rate_limiter.memory_cache["fresh"]["last_redis_sync"] = 0

        rate_limiter.check_rate_limit("fresh", 3, 60, fake_redis)

        fake_redis.set.assert_called_with("fresh", 2, ex=60)


class TestRateLimitDependency:
    def test_returns_429_with_retry_after(self, limited_client):
        assert limited_client.get("/limited").status_code == 200
        assert limited_client.get("/limited").status_code == 200

        response = limited_client.get("/limited")

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.json()["detail"]["error"] == "Rate limit exceeded"

    def test_keys_on_forwarded_ip(self, limited_client):
        for _ in range(2):
            limited_client.get("/limited", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

        blocked = limited_client.get("/limited", headers={"X-Forwarded-For": "203.0.113.7"})
        other = limited_client.get("/limited", headers={"X-Forwarded-For": "198.51.100.2"})

        assert blocked.status_code == 429
        assert other.status_code == 200
        assert "test_limit:203.0.113.7" in rate_limiter.memory_cache

    def test_redis_unavailable_is_503(self, limited_client, monkeypatch):
        def broken():
            raise ConnectionError("no redis")

        monkeypatch.setattr(rate_limiter, "get_redis_client", broken)

        assert limited_client.get("/limited").status_code == 503

    def test_disabled_skips_redis(self, limited_client, fake_redis, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")

        for _ in range(5):
            assert limited_client.get("/limited").status_code == 200
        fake_redis.get.assert_not_called()


class TestWebhookHelpers:
    def test_constant_time_compare(self):
        assert constant_time_compare("abc", "abc")
        assert not constant_time_compare("abc", "abd")
        assert not constant_time_compare("", "")

    def test_constant_time_compare_non_ascii(self):
        assert constant_time_compare("café", "café")
        assert not constant_time_compare("café", "cafe")
        assert not constant_time_compare("test-admin-kéy", "test-admin-key")

    def test_non_ascii_admin_key_is_unauthorized(self, client):
        response = client.get(
            "/api/crm/companies", headers={"X-Admin-Key": "test-admin-k\xe9y".encode("latin-1")}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid admin API key"

    def test_slack_signature_format(self):
        body = b"token=xyz&team_id=T1"
        signature = compute_slack_signature("secret", "1531420618", body)

        assert signature == "v0=" + compute_hmac_sha256("secret", b"v0:1531420618:" + body)

    def test_verify_timestamp(self):
        now = int(time.time())

        assert verify_timestamp(str(now))
        assert verify_timestamp(str(now - 120))
        assert not verify_timestamp(str(now - 301))
        assert not verify_timestamp(str(now + 600))
        assert not verify_timestamp("yesterday")
        assert not verify_timestamp(None)


class TestSanitization:
    def test_strip_control_chars_keeps_whitespace(self):
        assert strip_control_chars("a\x00b\tc\nd\x7f") == "ab\tc\nd"
        assert strip_control_chars(None) is None

    def test_escape_slack_text(self):
        assert escape_slack_text("<!channel> & <http://x|y>") == "&lt;!channel&gt; &amp; &lt;http://x|y&gt;"
        assert escape_slack_text(None) == ""

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("abcdefghij", 4) == "abcd..."
