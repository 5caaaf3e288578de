from django.urls import path

from .views import CheckStockView, InventoryDetailView, InventoryListCreateView

app_name = 'inventory'

urlpatterns = [
    path('inventory/', InventoryListCreateView.as_view(), name='inventory-list'),
    path('inventory/check-stock/', CheckStockView.as_view(), name='inventory-check-stock'),
    path('inventory/<int:pk>/', InventoryDetailView.as_view(), name='inventory-detail'),
]
