from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from dispensary.core.metrics import InMemoryRequestMetrics
from dispensary.core.rate_limiter import InMemoryRateLimiterService
from dispensary.middleware.chat_rate_limit import ChatRateLimitMiddleware
from dispensary.middleware.observability import ObservabilityMiddleware


def test_rate_limit_is_isolated_per_identity() -> None:
    service = InMemoryRateLimiterService(limit=2, window_seconds=60)

    first = service.check(identity="user:1", endpoint="/api/chat")
    second = service.check(identity="user:1", endpoint="/api/chat")
    blocked = service.check(identity="user:1", endpoint="/api/chat")
    other_user_still_allowed = service.check(identity="user:2", endpoint="/api/chat")

    assert first.allowed is True
    assert second.remaining == 0
    assert blocked.allowed is False
    assert blocked.retry_after_seconds >= 1
    assert other_user_still_allowed.allowed is True


def test_chat_limiter_ignores_other_paths_and_reads() -> None:
    limiter = InMemoryRateLimiterService(limit=1, window_seconds=60)
    app = FastAPI()
    app.add_middleware(ChatRateLimitMiddleware, rate_limiter=limiter)

    @app.post("/api/chat/ping")
    def chat_ping():
        return {"ok": True}

    @app.post("/api/orders/ping")
    def orders_ping():
        return {"ok": True}

    with TestClient(app) as client:
        ok = client.post("/api/chat/ping")
        blocked = client.post("/api/chat/ping")
        orders = [client.post("/api/orders/ping").status_code for _ in range(3)]

    assert ok.status_code == 200
    assert ok.headers["X-RateLimit-Limit"] == "1"
    assert blocked.status_code == 429
    assert orders == [200, 200, 200]


def test_metrics_snapshot_per_endpoint() -> None:
    metrics = InMemoryRequestMetrics()

    metrics.observe(endpoint="/api/orders", method="GET", status_code=200, duration_ms=10)
    metrics.observe(endpoint="/api/orders", method="GET", status_code=500, duration_ms=30)
    metrics.observe(endpoint="/api/products", method="GET", status_code=200, duration_ms=20)

    snapshot = metrics.snapshot()

    assert snapshot["GET /api/orders"]["total_requests"] == 2
    assert snapshot["GET /api/orders"]["error_count"] == 1
    assert snapshot["GET /api/orders"]["avg_duration_ms"] == 20.0
    assert snapshot["GET /api/products"]["total_requests"] == 1


def test_observability_middleware_sets_request_id_and_records_endpoint() -> None:
    from dispensary.core.metrics import request_metrics

    request_metrics.reset()
    app = FastAPI()
    app.add_middleware(ObservabilityMiddleware)

    @app.get("/api/items")
    def items():
        return []

    with TestClient(app) as client:
        response = client.get("/api/items")

    assert response.headers["X-Request-ID"]
    assert request_metrics.snapshot()["GET /api/items"]["total_requests"] == 1


def test_json_formatter_masks_secrets_and_carries_request_context() -> None:
    import json
    import logging

    from dispensary.core.logging_setup import JsonFormatter
    from dispensary.core.request_context import clear_request_context, set_request_context

    set_request_context(request_id="req-9", user_id="42")
    try:
        record = logging.LogRecord(
            name="dispensary.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="calling llm api_key=%s",
            args=("sk-live-123",),
            exc_info=None,
        )
        payload = json.loads(JsonFormatter("%(message)s").format(record))
    finally:
        clear_request_context()

    assert payload["message"] == "calling llm api_key=***"
    assert payload["request_id"] == "req-9"
    assert payload["user_id"] == "42"


def test_rate_limiter_drops_identities_after_window(monkeypatch) -> None:
    clock = {"now": 1000.0}
    monkeypatch.setattr("dispensary.core.rate_limiter.time.monotonic", lambda: clock["now"])
    service = InMemoryRateLimiterService(limit=5, window_seconds=60)

    for n in range(500):
        service.check(identity=f"ip:10.0.{n // 256}.{n % 256}", endpoint="/api/chat")
    assert service.tracked_keys == 500

    clock["now"] += 61
    decision = service.check(identity="ip:192.168.0.1", endpoint="/api/chat")

    assert decision.allowed is True
    assert service.tracked_keys == 1


def test_rate_limiter_keeps_blocked_identity_inside_window(monkeypatch) -> None:
    clock = {"now": 1000.0}
    monkeypatch.setattr("dispensary.core.rate_limiter.time.monotonic", lambda: clock["now"])
    service = InMemoryRateLimiterService(limit=1, window_seconds=60)

    service.check(identity="user:1", endpoint="/api/chat")
    clock["now"] += 30
    blocked = service.check(identity="user:1", endpoint="/api/chat")
    clock["now"] += 31
    allowed_again = service.check(identity="user:1", endpoint="/api/chat")

    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 30
    assert allowed_again.allowed is True
    assert service.tracked_keys == 1
