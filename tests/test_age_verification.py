from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from dispensary.core.database import get_db
from dispensary.deps import get_optional_user
from dispensary.models.age_verification import AgeVerification
from dispensary.models.user import User
from dispensary.routers.age_verification import router as age_router
from dispensary.services.age_verification import resolve_client_ip
from tests.db_support import build_session, seed_users
from tests.fixtures_data import SPOOFED_AGE_VERIFICATION_PAYLOAD


def _build_client(db, user=None):
    app = FastAPI()
    app.include_router(age_router)
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_optional_user] = lambda: user
    return TestClient(app)


def test_verify_ignores_client_supplied_ip():
    db = build_session()
    client = _build_client(db)

    response = client.post("/api/age-verification/verify", json=SPOOFED_AGE_VERIFICATION_PAYLOAD)

    record = db.query(AgeVerification).one()
    assert response.json() == {"success": True}
    assert record.ip_address == "testclient"
    assert record.ip_address != SPOOFED_AGE_VERIFICATION_PAYLOAD["ipAddress"]
    assert record.user_id is None


def test_verify_ignores_forwarded_headers():
    db = build_session()
    client = _build_client(db)

    client.post("/api/age-verification/verify", headers={"X-Forwarded-For": "198.51.100.7"})

    assert db.query(AgeVerification).one().ip_address == "testclient"


def test_verify_marks_authenticated_user():
    db = build_session()
    customer, _, _ = seed_users(db)
    client = _build_client(db, customer)

    client.post("/api/age-verification/verify")
    client.post("/api/age-verification/verify")

    user = db.query(User).filter(User.id == customer.id).one()
    assert user.age_verified is True
    assert user.age_verified_at is not None
    assert db.query(AgeVerification).filter(AgeVerification.user_id == customer.id).count() == 2


def test_resolve_client_ip_without_client_is_unknown():
    request = Request({"type": "http", "method": "POST", "path": "/", "headers": [], "query_string": b""})
    assert resolve_client_ip(request) == "unknown"

    request_with_client = SimpleNamespace(client=SimpleNamespace(host="10.0.0.5"))
    assert resolve_client_ip(request_with_client) == "10.0.0.5"
