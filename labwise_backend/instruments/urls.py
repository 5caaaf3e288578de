from django.urls import path

from .views import (
    InstrumentDetailView,
    InstrumentListCreateView,
    MaintenanceLogListCreateView,
    QCLogDetailView,
    QCLogListCreateView,
)

app_name = 'instruments'

urlpatterns = [
    path('instruments/', InstrumentListCreateView.as_view(), name='instrument-list'),
    path('instruments/<int:pk>/', InstrumentDetailView.as_view(), name='instrument-detail'),
    path('instruments/<int:pk>/logs/', MaintenanceLogListCreateView.as_view(), name='instrument-logs'),
    path('qc-logs/', QCLogListCreateView.as_view(), name='qc-log-list'),
    path('qc-logs/<int:pk>/', QCLogDetailView.as_view(), name='qc-log-detail'),
]
