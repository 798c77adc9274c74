"""API tests for the create-order endpoint.

These tests exercise the orders HTTP API for the main scenarios: successful
creation (with sale pricing and snapshots), empty carts, unknown products
and payload validation errors. Products are seeded in the test database.
"""
from decimal import Decimal

import pytest

from apps.orders.models import OrderLineModel, OrderModel

CREATE_URL = "/api/orders/"


def post(client, payload):
    return client.post(CREATE_URL, data=payload, content_type="application/json")


@pytest.mark.django_db
def test_create_order_returns_201_with_lines_and_location(client, products):
    """Valid cart returns 201, the stored order and a Location header."""
    mug, shirt = products["mug"], products["shirt"]
    payload = {
        "customerEmail": "ana@example.com",
        "items": [{"productId": mug.id, "quantity": 2}, {"productId": shirt.id, "quantity": 1}],
    }
    r = post(client, payload)
    assert r.status_code == 201
    body = r.json()
    assert r["Location"] == f"/api/orders/{body['id']}/"
    assert body["customerEmail"] == "ana@example.com"
    assert body["status"] == "COMPLETED"
    assert Decimal(body["totalAmount"]) == Decimal("44.99")
    assert body["completedAt"] is not None
    assert [(i["productName"], i["quantity"], Decimal(i["priceAtPurchase"])) for i in body["items"]] == [
        ("Mug", 2, Decimal("12.50")),
        ("Shirt", 1, Decimal("19.99")),
    ]


@pytest.mark.django_db
def test_create_persists_order_and_lines(client, products):
    mug = products["mug"]
    r = post(client, {"customerEmail": "ana@example.com", "items": [{"productId": mug.id, "quantity": 3}]})
    assert r.status_code == 201
    o = OrderModel.objects.get(pk=r.json()["id"])
    assert o.total_amount == Decimal("37.50")
    assert o.status == "COMPLETED"
    assert o.completed_at == o.created_at
    line = o.lines.get()
    assert (line.product_id, line.product_name, line.quantity) == (mug.id, "Mug", 3)


@pytest.mark.django_db
def test_create_order_pending_when_completion_waits_for_payment(client, settings, products):
    settings.ORDERS_COMPLETE_ON_CREATE = False
    r = post(client, {"customerEmail": "ana@example.com", "items": [{"productId": products["mug"].id, "quantity": 1}]})
    assert r.status_code == 201
    assert r.json()["status"] == "PENDING"
    assert r.json()["completedAt"] is None


@pytest.mark.django_db
def test_create_order_empty_cart_returns_400(client, products):
    r = post(client, {"customerEmail": "ana@example.com", "items": []})
    assert r.status_code == 400
    assert r.json()["detail"] == "EMPTY_CART"
    assert OrderModel.objects.count() == 0


@pytest.mark.django_db
def test_create_order_unknown_product_returns_400_and_persists_nothing(client, products):
    payload = {
        "customerEmail": "ana@example.com",
        "items": [{"productId": products["mug"].id, "quantity": 1}, {"productId": 9999, "quantity": 1}],
    }
    r = post(client, payload)
    assert r.status_code == 400
    assert r.json() == {"detail": "PRODUCT_NOT_FOUND", "productId": 9999}
    assert OrderModel.objects.count() == 0
    assert OrderLineModel.objects.count() == 0


@pytest.mark.django_db
def test_create_order_total_too_large_returns_422_and_persists_nothing(client, products):
    """A total that does not fit the stored amount is rejected, not written."""
    payload = {"customerEmail": "ana@example.com", "items": [{"productId": products["mug"].id, "quantity": 2_000_000_000}]}
    r = post(client, payload)
    assert r.status_code == 422
    assert r.json() == {"detail": "TOTAL_OUT_OF_RANGE", "maxTotal": "9999999999.99"}
    assert OrderModel.objects.count() == 0
    assert OrderLineModel.objects.count() == 0


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload",
    [
        {"customerEmail": "not-an-email", "items": [{"productId": 1, "quantity": 1}]},
        {"items": [{"productId": 1, "quantity": 1}]},
        {"customerEmail": "ana@example.com"},
        {"customerEmail": "ana@example.com", "items": [{"productId": 1, "quantity": 0}]},
        {"customerEmail": "ana@example.com", "items": [{"productId": 1, "quantity": 2**63}]},
        {"customerEmail": "ana@example.com", "items": [{"productId": 2**63, "quantity": 1}]},
    ],
    ids=["malformed-email", "missing-email", "missing-items", "zero-quantity", "quantity-overflow", "product-id-overflow"],
)
def test_create_order_validation_error(client, payload):
    """Returns 422 when the payload fails DTO validation."""
    r = post(client, payload)
    assert r.status_code == 422
    body = r.json()
    assert body["detail"] == "VALIDATION_ERROR"
    assert body["errors"]
    assert OrderModel.objects.count() == 0


@pytest.mark.django_db
def test_create_order_propagates_request_id(client, products):
    r = client.post(
        CREATE_URL,
        data={"customerEmail": "ana@example.com", "items": [{"productId": products["mug"].id, "quantity": 1}]},
        content_type="application/json",
        HTTP_X_REQUEST_ID="req-123",
    )
    assert r.status_code == 201
    assert r["X-Request-ID"] == "req-123"


@pytest.mark.django_db
def test_oversized_payload_rejected(client, settings):
    settings.API_MAX_BYTES = 10
    r = post(client, {"customerEmail": "ana@example.com", "items": []})
    assert r.status_code == 413
    assert r.json()["detail"] == "PAYLOAD_TOO_LARGE"
