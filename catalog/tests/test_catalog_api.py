import pytest
from branches.tests.factories import BranchFactory
from catalog.models import Product
from catalog.tests.factories import CategoryFactory, ProductFactory, ProductVariantFactory
from inventory.models import StockItem
from rest_framework.test import APIClient
from users.tests.factories import AdminFactory, UserFactory


@pytest.fixture
def branch():
    return BranchFactory(name="Centro")


@pytest.fixture
def admin_client(branch):
    client = APIClient()
    client.force_authenticate(AdminFactory(branch=branch))
    return client


@pytest.fixture
def seller_client(branch):
    client = APIClient()
    client.force_authenticate(UserFactory(branch=branch))
    return client


@pytest.mark.django_db
def test_seller_can_read_but_not_write_categories(seller_client):
    CategoryFactory(name="Drinks")
    resp = seller_client.get("/api/v1/catalog/categories/")
    assert resp.status_code == 200
    assert [c["name"] for c in resp.data] == ["Drinks"]

    resp = seller_client.post("/api/v1/catalog/categories/", {"name": "Food"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_admin_creates_product_with_seeded_stock(admin_client, branch):
    BranchFactory(name="Norte")
    category = CategoryFactory()
    resp = admin_client.post(
        "/api/v1/catalog/products/",
        {
            "name": "T-Shirt",
            "price": "20.00",
            "cost": "8.00",
            "category": category.id,
            "stock": 5,
            "variants": [{"name": "Size", "value": "M"}],
        },
        format="json",
    )
    assert resp.status_code == 201, resp.data
    assert resp.data["variants"][0]["unit_price"] == "20.00"
    assert StockItem.objects.filter(product_id=resp.data["id"]).count() == 2
    assert StockItem.objects.filter(variant_id=resp.data["variants"][0]["id"]).count() == 2


@pytest.mark.django_db
def test_update_without_stock_is_rejected_and_keeps_variant_stock(admin_client, branch):
    product = ProductFactory()
    variant = ProductVariantFactory(product=product, name="Size", value="M")
    StockItem.objects.create(product=product, branch=branch, stock=10)
    StockItem.objects.create(variant=variant, branch=branch, stock=10)

    resp = admin_client.put(
        f"/api/v1/catalog/products/{product.id}/",
        {
            "name": product.name,
            "price": "20.00",
            "cost": "8.00",
            "category": product.category_id,
            "variants": [{"name": "Size", "value": "M"}],
        },
        format="json",
    )
    assert resp.status_code == 400
    assert "stock" in resp.data
    assert list(StockItem.objects.filter(variant__product=product).values_list("stock", flat=True)) == [10]


@pytest.mark.django_db
def test_product_write_validation_error_shape(admin_client):
    resp = admin_client.post(
        "/api/v1/catalog/products/",
        {"name": "Bad", "price": "0", "cost": "1", "category": CategoryFactory().id},
        format="json",
    )
    assert resp.status_code == 400
    assert "price" in resp.data


@pytest.mark.django_db
def test_delete_deactivates_and_restore_reactivates(admin_client):
    product = ProductFactory()
    resp = admin_client.delete(f"/api/v1/catalog/products/{product.id}/")
    assert resp.status_code == 204
    assert Product.objects.get(id=product.id).active is False

    resp = admin_client.post(f"/api/v1/catalog/products/{product.id}/restore/")
    assert resp.status_code == 200
    assert resp.data["active"] is True


@pytest.mark.django_db
def test_delete_category_in_use_returns_conflict(admin_client):
    product = ProductFactory()
    resp = admin_client.delete(f"/api/v1/catalog/categories/{product.category_id}/")
    assert resp.status_code == 409
    assert resp.data["code"] == "conflict"


@pytest.mark.django_db
def test_seller_cannot_manage_products(seller_client):
    resp = seller_client.get("/api/v1/catalog/products/")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_pos_products_show_branch_stock(seller_client, branch):
    other = BranchFactory(name="Norte")
    product = ProductFactory(name="Coffee")
    variant = ProductVariantFactory(product=ProductFactory(name="Shirt"), value="M")
    StockItem.objects.create(product=product, branch=branch, stock=7)
    StockItem.objects.create(product=product, branch=other, stock=99)
    StockItem.objects.create(variant=variant, branch=branch, stock=2)
    ProductFactory(name="Hidden", active=False)

    resp = seller_client.get("/api/v1/catalog/pos-products/")
    assert resp.status_code == 200
    by_name = {p["name"]: p for p in resp.data}
    assert set(by_name) == {"Coffee", "Shirt"}
    assert by_name["Coffee"]["branch_stock"] == 7
    assert by_name["Shirt"]["branch_stock"] == 0
    assert by_name["Shirt"]["variants"][0]["branch_stock"] == 2


@pytest.mark.django_db
def test_pos_products_require_branch():
    client = APIClient()
    client.force_authenticate(UserFactory(branch=None))
    resp = client.get("/api/v1/catalog/pos-products/")
    assert resp.status_code == 400
    assert resp.data["code"] == "no_branch_assigned"


@pytest.mark.django_db
def test_seller_cannot_list_another_branch(seller_client):
    other = BranchFactory(name="Norte")
    resp = seller_client.get(f"/api/v1/catalog/pos-products/?branch={other.id}")
    assert resp.status_code == 403
