from django.urls import path

from labwise_backend.patients.views import (
    PatientListCreateView,
    PatientRetrieveUpdateView,
    VerifyEligibilityView,
)

app_name = 'patients'

urlpatterns = [
    path('patients/', PatientListCreateView.as_view(), name='patient-list'),
    path('patients/<int:pk>/', PatientRetrieveUpdateView.as_view(), name='patient-detail'),
    path('verify-eligibility/', VerifyEligibilityView.as_view(), name='verify-eligibility'),
]
