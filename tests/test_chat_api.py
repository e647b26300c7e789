from unittest.mock import patch

from fastapi import FastAPI
from fastapi.testclient import TestClient

from dispensary.core.database import get_db
from dispensary.core.rate_limiter import InMemoryRateLimiterService
from dispensary.deps import get_current_user
from dispensary.middleware.chat_rate_limit import ChatRateLimitMiddleware
from dispensary.routers.chat import router as chat_router
from dispensary.services import chat as chat_service
from tests.db_support import build_session, seed_users
from tests.fixtures_data import LLM_REPLY, RECOMMENDATION_MESSAGE


class StubLLM:
    name = "stub"
    model = "stub"

    def complete(self, messages):
        return LLM_REPLY


def _build_client(db, user, *, rate_limiter=None):
    app = FastAPI()
    if rate_limiter is not None:
        app.add_middleware(ChatRateLimitMiddleware, rate_limiter=rate_limiter)
    app.include_router(chat_router)
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: user
    return TestClient(app)


def test_customer_flow_start_send_and_poll():
    db = build_session()
    customer, _, _ = seed_users(db)
    client = _build_client(db, customer)

    started = client.post("/api/chat/conversations", json={"subject": "Sleep"})
    again = client.post("/api/chat/conversations", json={})
    conversation_id = started.json()["id"]

    with patch("dispensary.ai.service.get_provider", return_value=StubLLM()):
        sent = client.post(
            f"/api/chat/conversations/{conversation_id}/messages",
            json={"message": RECOMMENDATION_MESSAGE},
        )

    polled = client.get(f"/api/chat/conversations/{conversation_id}/messages")
    newer = client.get(
        f"/api/chat/conversations/{conversation_id}/messages",
        params={"after_id": sent.json()["message_id"]},
    )

    assert again.json()["id"] == conversation_id
    assert sent.status_code == 200
    assert sent.json()["ai_response"] == LLM_REPLY
    assert [m["sender_id"] for m in polled.json()] == [customer.id, 0]
    assert [m["message"] for m in newer.json()] == [LLM_REPLY]


def test_other_user_gets_forbidden_on_messages_routes():
    db = build_session()
    customer, other, _ = seed_users(db)
    conversation = chat_service.start_or_get_conversation(db, customer.id)
    client = _build_client(db, other)

    read = client.get(f"/api/chat/conversations/{conversation.id}/messages")
    send = client.post(f"/api/chat/conversations/{conversation.id}/messages", json={"message": "hi"})
    close = client.post(f"/api/chat/conversations/{conversation.id}/close")

    for response in (read, send, close):
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "FORBIDDEN"


def test_admin_routes_require_admin_role():
    db = build_session()
    customer, _, admin = seed_users(db)
    conversation = chat_service.start_or_get_conversation(db, customer.id)

    denied = _build_client(db, customer).get("/api/chat/admin/conversations")
    admin_client = _build_client(db, admin)
    listed = admin_client.get("/api/chat/admin/conversations")
    assigned = admin_client.post(
        f"/api/chat/admin/conversations/{conversation.id}/assign",
        json={"agent_id": admin.id},
    )
    messages = admin_client.get(f"/api/chat/conversations/{conversation.id}/messages")

    assert denied.status_code == 403
    assert [c["id"] for c in listed.json()] == [conversation.id]
    assert assigned.json() == {"success": True}
    assert messages.status_code == 200


def test_chat_writes_are_rate_limited_per_identity():
    db = build_session()
    customer, _, _ = seed_users(db)
    client = _build_client(db, customer, rate_limiter=InMemoryRateLimiterService(limit=2, window_seconds=60))

    first = client.post("/api/chat/conversations", json={})
    second = client.post("/api/chat/conversations", json={})
    blocked = client.post("/api/chat/conversations", json={})
    read = client.get("/api/chat/conversations")

    assert first.status_code == 200
    assert second.status_code == 200
    assert blocked.status_code == 429
    assert blocked.json()["detail"]["code"] == "TOO_MANY_REQUESTS"
    assert int(blocked.headers["Retry-After"]) >= 1
    assert read.status_code == 200


def test_online_agents_is_public():
    db = build_session()
    app = FastAPI()
    app.include_router(chat_router)
    app.dependency_overrides[get_db] = lambda: db

    response = TestClient(app).get("/api/chat/agents/online")

    assert response.status_code == 200
    assert response.json() == []
