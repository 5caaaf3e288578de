from django.urls import path

from .views import AppointmentDetailView, AppointmentListCreateView, CollectSamplesView

app_name = 'appointments'

urlpatterns = [
	path('appointments/', AppointmentListCreateView.as_view(), name='appointment-list'),
	path('appointments/<int:pk>/', AppointmentDetailView.as_view(), name='appointment-detail'),
	path('appointments/<int:pk>/collect/', CollectSamplesView.as_view(), name='appointment-collect'),
]
