import pytest
from django.contrib.admin.sites import site
from django.test import RequestFactory
from inventory.models import StockItem, StockMovement
from users.tests.factories import AdminFactory

from .factories import ProductStockFactory


@pytest.mark.django_db
@pytest.mark.parametrize("model", [StockItem, StockMovement])
def test_admin_cannot_write_stock_or_movements(model):
    user = AdminFactory(is_staff=True, is_superuser=True)
    request = RequestFactory().get("/admin/")
    request.user = user
    model_admin = site._registry[model]

    assert model_admin.has_add_permission(request) is False
    assert model_admin.has_change_permission(request) is False
    assert model_admin.has_delete_permission(request) is False


@pytest.mark.django_db
def test_admin_change_page_does_not_update_stock(client):
    item = ProductStockFactory(stock=5)
    client.force_login(AdminFactory(is_staff=True, is_superuser=True))

    resp = client.post(f"/admin/inventory/stockitem/{item.id}/change/", {"stock": 500})

    assert resp.status_code in (200, 403)
    item.refresh_from_db()
    assert item.stock == 5
    assert not StockMovement.objects.exists()
