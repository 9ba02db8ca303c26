from django.urls import path

from .views import MovementListView, StockAdjustView, StockItemListView

urlpatterns = [
    path("adjust/", StockAdjustView.as_view(), name="stock-adjust"),
    path("stock-items/", StockItemListView.as_view(), name="stock-item-list"),
    path("movements/", MovementListView.as_view(), name="movement-list"),
]

# EOF
