from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import BranchViewSet

router = SimpleRouter()
router.register(r"", BranchViewSet, basename="branch")

urlpatterns = [path("", include(router.urls))]
