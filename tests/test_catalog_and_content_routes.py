from datetime import date, datetime

from fastapi import FastAPI
from fastapi.testclient import TestClient

from dispensary.core.database import get_db
from dispensary.deps import get_current_user
from dispensary.models.appointment import Appointment
from dispensary.models.blog_post import BlogPost
from dispensary.models.notification import Notification
from dispensary.models.user_preference import UserPreference
from dispensary.routers.appointments import router as appointments_router
from dispensary.routers.blog import router as blog_router
from dispensary.routers.notifications import router as notifications_router
from dispensary.routers.preferences import router as preferences_router
from dispensary.routers.products import router as products_router
from dispensary.services.appointments import available_slots
from tests.db_support import build_session, seed_products, seed_users


def _build_client(db, user=None):
    app = FastAPI()
    for router in (products_router, appointments_router, blog_router, notifications_router, preferences_router):
        app.include_router(router)
    app.dependency_overrides[get_db] = lambda: db
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    return TestClient(app)


def test_products_list_only_active_and_filter_by_category():
    db = build_session()
    seed_products(db)
    client = _build_client(db)

    all_products = client.get("/api/products")
    edibles = client.get("/api/products", params={"category": "edibles"})
    invalid = client.get("/api/products", params={"category": "seeds"})

    assert sorted(p["id"] for p in all_products.json()) == [1, 2]
    assert [p["name"] for p in edibles.json()] == ["Calm Gummies"]
    assert invalid.status_code == 422
    assert invalid.json()["detail"]["code"] == "VALIDATION"


def test_product_detail_serializes_money_and_effects():
    db = build_session()
    seed_products(db)
    client = _build_client(db)

    found = client.get("/api/products/1")
    inactive = client.get("/api/products/3")

    assert found.json()["price"] == "10.00"
    assert found.json()["thc_level"] == "21.50"
    assert found.json()["effects"] == ["relaxed", "happy"]
    assert inactive.status_code == 404
    assert inactive.json()["detail"] == {"code": "NOT_FOUND", "message": "Product 3 not found"}


def test_products_by_ids_keeps_requested_order_and_handles_empty():
    db = build_session()
    seed_products(db)
    client = _build_client(db)

    response = client.get("/api/products/by-ids", params=[("ids", 2), ("ids", 99), ("ids", 1)])
    empty = client.get("/api/products/by-ids")

    assert [p["id"] for p in response.json()] == [2, 1]
    assert empty.json() == []


def test_available_slots_are_eight_hourly_slots_from_ten():
    slots = available_slots(date(2026, 3, 14))

    assert len(slots) == 8
    assert slots[0] == datetime(2026, 3, 14, 10, 0)
    assert slots[-1] == datetime(2026, 3, 14, 17, 0)


def test_appointments_create_and_list():
    db = build_session()
    customer, _, _ = seed_users(db)
    client = _build_client(db, customer)

    slots = client.get("/api/appointments/slots", params={"date": "2026-03-14"})
    created = client.post(
        "/api/appointments",
        json={"appointment_time": slots.json()[0], "consultation_type": "follow_up", "notes": "First visit"},
    )
    listed = client.get("/api/appointments")

    assert created.status_code == 201
    assert created.json()["appointment_number"].startswith("APT-")
    appointment = db.query(Appointment).one()
    assert appointment.doctor_name == "Dr. Cannabis Specialist"
    assert appointment.duration == 30
    assert appointment.status == "scheduled"
    assert [a["id"] for a in listed.json()] == [appointment.id]


def test_blog_lists_published_newest_first_and_slug_lookup():
    db = build_session()
    db.add_all(
        [
            BlogPost(title="Old", slug="old", content="...", published=True, published_at=datetime(2025, 1, 1)),
            BlogPost(title="New", slug="new", content="body", published=True, published_at=datetime(2025, 6, 1)),
            BlogPost(title="Draft", slug="draft", content="...", published=False),
        ]
    )
    db.commit()
    client = _build_client(db)

    listed = client.get("/api/blog")
    found = client.get("/api/blog/new")
    draft = client.get("/api/blog/draft")

    assert [p["slug"] for p in listed.json()] == ["new", "old"]
    assert "content" not in listed.json()[0]
    assert found.json()["content"] == "body"
    assert draft.status_code == 404


def test_notifications_and_preferences_are_scoped_to_caller():
    db = build_session()
    customer, other, _ = seed_users(db)
    db.add_all(
        [
            Notification(user_id=customer.id, type="order_ready", title="Ready", message="Pick it up"),
            Notification(user_id=other.id, type="promotion", title="Sale", message="10% off"),
            UserPreference(user_id=customer.id, favorite_products="[1, 2]", notification_preferences='{"email": true}'),
        ]
    )
    db.commit()

    mine = _build_client(db, customer)
    theirs = _build_client(db, other)

    assert [n["title"] for n in mine.get("/api/notifications").json()] == ["Ready"]
    assert mine.get("/api/preferences").json()["favorite_products"] == [1, 2]
    assert mine.get("/api/preferences").json()["notification_preferences"] == {"email": True}
    assert theirs.get("/api/preferences").json() is None
