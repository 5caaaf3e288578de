from django.urls import path

from .views import KPIView

app_name = 'dashboard'

urlpatterns = [
    path('reports/kpi/', KPIView.as_view(), name='reports-kpi'),
]
