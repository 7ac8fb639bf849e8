from datetime import timedelta

import pytest

from main import app
from routers import rate_limit
from services.session_token import create_session_token, decode_session_token, issue_token


async def _redis_down(*args, **kwargs):
    raise ConnectionError("redis unavailable")


@pytest.mark.asyncio
async def test_quota_falls_back_to_local_counters(api_client, monkeypatch):
    app.state.disable_rate_limits = False
    monkeypatch.setattr(rate_limit, "_consume_redis_quota", _redis_down)
    monkeypatch.setitem(rate_limit.QUOTAS, "auth_signin", (2, 60))

    body = {"login": "nobody", "password": "whatever"}
    statuses = [(await api_client.post("/auth/signin", json=body)).status_code for _ in range(3)]

    assert statuses == [401, 401, 429]
    blocked = await api_client.post("/auth/signin", json=body, headers={"X-Forwarded-For": "10.0.0.9"})
    assert blocked.status_code == 401


@pytest.mark.asyncio
async def test_rate_limit_response_carries_retry_after(api_client, monkeypatch):
    app.state.disable_rate_limits = False
    monkeypatch.setattr(rate_limit, "_consume_redis_quota", _redis_down)
    monkeypatch.setitem(rate_limit.QUOTAS, "auth_signin", (0, 60))

    response = await api_client.post("/auth/signin", json={"login": "x", "password": "y"})
    assert response.status_code == 429
    assert 1 <= int(response.headers["retry-after"]) <= 60


def test_unknown_quota_is_a_programming_error():
    with pytest.raises(KeyError):
        rate_limit.rate_limit("nope")


def test_session_decoder_rejects_other_token_types():
    upload_ticket, _ = issue_token("rankmaker_upload", {"sub": "user-1"}, timedelta(minutes=5))
    with pytest.raises(ValueError):
        decode_session_token(upload_ticket)

    session = create_session_token("user-1", "alice")
    claims = decode_session_token(session["token"])
    assert claims["sub"] == "user-1"
    assert claims["username"] == "alice"
