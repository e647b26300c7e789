import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dispensary.core.database import get_db
from dispensary.models.user import User
from dispensary.routers.auth import router as auth_router
from dispensary.services import auth as auth_helpers
from dispensary.services.auth_service import upsert_user
from tests.db_support import build_session, seed_users


def _build_client(db):
    app = FastAPI()
    app.include_router(auth_router)
    app.dependency_overrides[get_db] = lambda: db
    return TestClient(app)


def test_session_token_roundtrip_and_tamper(monkeypatch):
    monkeypatch.setattr(auth_helpers, "SESSION_SECRET", "test-secret")

    token = auth_helpers.create_session_token(7, open_id="abc", role="user")
    payload = auth_helpers.decode_session_token(token)

    assert payload["sub"] == "7"
    assert payload["open_id"] == "abc"
    assert auth_helpers.decode_session_token(token + "x") is None


def test_decode_without_secret_returns_none(monkeypatch):
    monkeypatch.setattr(auth_helpers, "SESSION_SECRET", "")

    assert auth_helpers.decode_session_token("anything") is None


def test_me_returns_user_for_bearer_and_cookie(monkeypatch):
    monkeypatch.setattr(auth_helpers, "SESSION_SECRET", "test-secret")
    db = build_session()
    customer, _, _ = seed_users(db)
    token = auth_helpers.create_session_token(customer.id, open_id=customer.open_id, role=customer.role)
    client = _build_client(db)

    anonymous = client.get("/api/auth/me")
    bearer = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    client.cookies.set(auth_helpers.SESSION_COOKIE_NAME, token)
    cookie = client.get("/api/auth/me")

    assert anonymous.json() is None
    assert bearer.json()["open_id"] == customer.open_id
    assert cookie.json()["id"] == customer.id


def test_session_for_deleted_user_is_anonymous(monkeypatch):
    monkeypatch.setattr(auth_helpers, "SESSION_SECRET", "test-secret")
    db = build_session()
    token = auth_helpers.create_session_token(404, open_id="ghost", role="admin")

    response = _build_client(db).get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.json() is None


def test_logout_clears_session_cookie():
    db = build_session()

    response = _build_client(db).post("/api/auth/logout")

    assert response.json() == {"success": True}
    set_cookie = response.headers["set-cookie"]
    assert f"{auth_helpers.SESSION_COOKIE_NAME}=" in set_cookie
    assert "httponly" in set_cookie.lower()


def test_upsert_user_promotes_owner_and_keeps_fields(monkeypatch):
    monkeypatch.setattr("dispensary.services.auth_service.OWNER_OPEN_ID", "owner-1")
    db = build_session()

    owner = upsert_user(db, open_id="owner-1", name="Owner")
    customer = upsert_user(db, open_id="cust-1", name="Cust", email="c@example.com")
    updated = upsert_user(db, open_id="cust-1", name="Customer")

    assert owner.role == "admin"
    assert customer.role == "user"
    assert updated.id == customer.id
    assert updated.email == "c@example.com"
    assert db.query(User).count() == 2


@pytest.mark.parametrize("kwargs", [{"open_id": ""}, {"open_id": "x", "role": "superuser"}])
def test_upsert_user_rejects_bad_input(kwargs):
    db = build_session()

    with pytest.raises(ValueError):
        upsert_user(db, **kwargs)
