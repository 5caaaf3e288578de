"""LabWise URL Configuration.

API routes, all under /api/v1/:
    health/, auth/, users/, audit-logs/    - core
    patients/, verify-eligibility/         - patients
    test-catalog/                          - catalog
    orders/, samples/, results/, worklist/ - orders
    appointments/                          - appointments
    inventory/                             - inventory
    instruments/, qc-logs/                 - instruments
    reports/kpi/                           - dashboard
    portal/                                - portal
"""

from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path


def root(request):
    return HttpResponse("LabWise backend is running.")


urlpatterns = [
    path("", root, name="root"),
    path("admin/", admin.site.urls),

    path("api/v1/", include("labwise_backend.core.urls")),
    path("api/v1/", include("labwise_backend.patients.urls")),
    path("api/v1/", include("labwise_backend.catalog.urls")),
    path("api/v1/", include("labwise_backend.orders.urls")),
    path("api/v1/", include("labwise_backend.appointments.urls")),
    path("api/v1/", include("labwise_backend.inventory.urls")),
    path("api/v1/", include("labwise_backend.instruments.urls")),
    path("api/v1/", include("labwise_backend.dashboard.urls")),
    path("api/v1/", include("labwise_backend.portal.urls")),
]
