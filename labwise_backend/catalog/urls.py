from django.urls import path

from labwise_backend.catalog.views import TestCatalogDetailView, TestCatalogListCreateView

app_name = 'catalog'

urlpatterns = [
    path('test-catalog/', TestCatalogListCreateView.as_view(), name='test-catalog-list'),
    path('test-catalog/<int:pk>/', TestCatalogDetailView.as_view(), name='test-catalog-detail'),
]
