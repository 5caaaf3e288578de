from django.urls import path

from labwise_backend.orders.views import (
	OrderDetailView,
	OrderListCreateView,
	OrderPDFView,
	SampleAccessionView,
	SampleRejectView,
	VerifyResultsView,
	WorklistView,
)

app_name = 'orders'

urlpatterns = [
	path('orders/', OrderListCreateView.as_view(), name='order-list'),
	path('orders/<int:pk>/', OrderDetailView.as_view(), name='order-detail'),
	path('orders/<int:pk>/pdf/', OrderPDFView.as_view(), name='order-pdf'),
	path('samples/accession/', SampleAccessionView.as_view(), name='sample-accession'),
	path('samples/reject/', SampleRejectView.as_view(), name='sample-reject'),
	path('results/verify/', VerifyResultsView.as_view(), name='results-verify'),
	path('worklist/', WorklistView.as_view(), name='worklist'),
]
