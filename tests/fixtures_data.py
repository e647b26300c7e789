"""Conjunto de dados reutilizável para cenários de teste backend."""

from decimal import Decimal

CUSTOMER = {
    "id": 1,
    "open_id": "customer-open-id",
    "name": "Casey Customer",
    "email": "casey@example.com",
    "role": "user",
}

OTHER_CUSTOMER = {
    "id": 2,
    "open_id": "other-open-id",
    "name": "Riley Other",
    "email": "riley@example.com",
    "role": "user",
}

ADMIN = {
    "id": 9,
    "open_id": "owner-open-id",
    "name": "Store Admin",
    "email": "admin@example.com",
    "role": "admin",
}

PRODUCTS = [
    {
        "id": 1,
        "name": "Blue Dream",
        "category": "flower",
        "price": Decimal("10.00"),
        "quantity": 5,
        "thc_level": Decimal("21.50"),
        "strain": "hybrid",
        "effects": '["relaxed", "happy"]',
        "active": True,
    },
    {
        "id": 2,
        "name": "Calm Gummies",
        "category": "edibles",
        "price": Decimal("20.00"),
        "quantity": 3,
        "cbd_level": Decimal("10.00"),
        "active": True,
    },
    {
        "id": 3,
        "name": "Retired Vape",
        "category": "concentrates",
        "price": Decimal("35.00"),
        "quantity": 10,
        "active": False,
    },
]

HAPPY_PATH_CART = [
    {"product_id": 1, "quantity": 2},
    {"product_id": 2, "quantity": 1},
]

HAPPY_PATH_ORDER_PAYLOAD = {
    "items": HAPPY_PATH_CART,
    "fulfillment_type": "pickup",
    "notes": "Call when ready",
}

DELIVERY_WITHOUT_ADDRESS_PAYLOAD = {
    "items": [{"product_id": 1, "quantity": 1}],
    "fulfillment_type": "delivery",
    "delivery_address": "   ",
}

RECOMMENDATION_MESSAGE = "Can you Recommend something for sleep?"
PLAIN_MESSAGE = "Hi, are you open on Sunday?"
LLM_REPLY = "Try Blue Dream in the evening or a low-dose CBN tincture."

SPOOFED_AGE_VERIFICATION_PAYLOAD = {"ipAddress": "203.0.113.99"}
