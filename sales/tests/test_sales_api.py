from datetime import timedelta
from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory
from django.core.management import call_command
from django.utils import timezone
from inventory.models import StockItem
from rest_framework.test import APIClient
from sales.models import IdempotencyKey, Sale
from sales.tests.factories import SaleFactory
from users.tests.factories import AdminFactory, UserFactory


@pytest.fixture
def seller():
    return UserFactory()


@pytest.fixture
def seller_client(seller):
    api = APIClient()
    api.force_authenticate(seller)
    return api


@pytest.fixture
def product(seller):
    product = ProductFactory(price=Decimal("3.00"))
    StockItem.objects.create(product=product, branch=seller.branch, stock=5)
    return product


@pytest.mark.django_db
def test_place_sale_api(seller_client, product):
    resp = seller_client.post(
        "/api/v1/sales/",
        {"items": [{"product": product.id, "quantity": 2}], "payment_method": "cash", "cash_amount": "10.00"},
        format="json",
    )
    assert resp.status_code == 201, resp.data
    assert resp.data["total"] == "6.00"
    assert resp.data["change"] == "4.00"
    assert resp.data["items"][0]["product_name"] == product.name
    assert StockItem.objects.get(product=product).stock == 3


@pytest.mark.django_db
def test_sale_insufficient_stock_returns_conflict(seller_client, product):
    resp = seller_client.post(
        "/api/v1/sales/",
        {"items": [{"product": product.id, "quantity": 9}], "payment_method": "card"},
        format="json",
    )
    assert resp.status_code == 409
    assert resp.data["code"] == "insufficient_stock"
    assert resp.data["detail"].startswith("Line 1:")
    assert not Sale.objects.exists()


@pytest.mark.django_db
def test_empty_items_rejected_by_serializer(seller_client):
    resp = seller_client.post("/api/v1/sales/", {"items": [], "payment_method": "card"}, format="json")
    assert resp.status_code == 400
    assert "items" in resp.data


@pytest.mark.django_db
def test_idempotent_resubmission_creates_one_sale(seller_client, product):
    body = {"items": [{"product": product.id, "quantity": 1}], "payment_method": "card"}
    first = seller_client.post("/api/v1/sales/", body, format="json", HTTP_IDEMPOTENCY_KEY="abc-1")
    second = seller_client.post("/api/v1/sales/", body, format="json", HTTP_IDEMPOTENCY_KEY="abc-1")

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.data["id"] == first.data["id"]
    assert Sale.objects.count() == 1
    assert StockItem.objects.get(product=product).stock == 4

    other = seller_client.post(
        "/api/v1/sales/",
        {"items": [{"product": product.id, "quantity": 2}], "payment_method": "card"},
        format="json",
        HTTP_IDEMPOTENCY_KEY="abc-1",
    )
    assert other.status_code == 409


@pytest.mark.django_db
def test_failed_sale_does_not_burn_idempotency_key(seller_client, product):
    body = {"items": [{"product": product.id, "quantity": 50}], "payment_method": "card"}
    resp = seller_client.post("/api/v1/sales/", body, format="json", HTTP_IDEMPOTENCY_KEY="retry-me")
    assert resp.status_code == 409
    assert not IdempotencyKey.objects.filter(key="retry-me").exists()


@pytest.mark.django_db
def test_history_scoped_by_role(seller_client, seller):
    own = SaleFactory(user=seller)
    SaleFactory()

    resp = seller_client.get("/api/v1/sales/")
    assert resp.status_code == 200
    assert [s["id"] for s in resp.data] == [own.id]

    admin = APIClient()
    admin.force_authenticate(AdminFactory())
    assert len(admin.get("/api/v1/sales/").data) == 2


@pytest.mark.django_db
def test_sale_detail_hides_other_branches(seller_client):
    foreign = SaleFactory()
    assert seller_client.get(f"/api/v1/sales/{foreign.id}/").status_code == 404


@pytest.mark.django_db
def test_history_limit(seller_client, seller, settings):
    settings.POS_SALE_HISTORY_LIMIT = 2
    for _ in range(3):
        SaleFactory(user=seller)
    assert len(seller_client.get("/api/v1/sales/").data) == 2


@pytest.mark.django_db
def test_cleanup_idempotency_command(seller):
    IdempotencyKey.objects.create(
        key="old", scope="anon", path="/", method="POST", expires_at=timezone.now() - timedelta(hours=1)
    )
    IdempotencyKey.objects.create(
        key="new", scope="anon", path="/", method="POST", expires_at=timezone.now() + timedelta(hours=1)
    )
    call_command("cleanup_idempotency")
    assert list(IdempotencyKey.objects.values_list("key", flat=True)) == ["new"]
