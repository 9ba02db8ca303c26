"""URL routes for the catalog app."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CategoryViewSet, PosProductListView, ProductAdminViewSet

router = SimpleRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"products", ProductAdminViewSet, basename="product")

urlpatterns = [
    path("pos-products/", PosProductListView.as_view(), name="pos-products"),
    path("", include(router.urls)),
]
