from django.urls import path

from .views import PortalLoginView, PortalOrdersView

app_name = 'portal'

urlpatterns = [
    path('portal/auth/login/', PortalLoginView.as_view(), name='login'),
    path('portal/orders/', PortalOrdersView.as_view(), name='orders'),
]
