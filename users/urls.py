"""Aggregate user namespaces under /api/v1/.

Re-exports the "auth" and "account" URLconfs and registers the admin user
router so the project includes a single users entry point.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import UserAdminViewSet

router = SimpleRouter()
router.register(r"users", UserAdminViewSet, basename="admin-user")

urlpatterns = [
    path("auth/", include("users.auth_urls")),
    path("account/", include("users.account_urls")),
    path("", include(router.urls)),
]
