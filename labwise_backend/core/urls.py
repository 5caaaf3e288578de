"""Core App URLs - Authentication, users, audit trail & health.

Prefix: /api/v1/
Routes:
    GET  health/            - Health check (no auth)
    POST auth/login/        - JWT token obtain with user/role info
    POST auth/refresh/      - JWT token refresh
    GET  auth/me/           - Current user info
    GET/POST users/         - User administration
    GET/PUT/DELETE users/<id>/
    GET  audit-logs/        - Audit trail (manager)
"""

from django.urls import path

from labwise_backend.core.views import (
    health,
    AuditLogListView,
    LoginView,
    MeView,
    RefreshView,
    UserDetailView,
    UserListCreateView,
)

app_name = 'core'

urlpatterns = [
    path('health/', health, name='health'),

    path('auth/login/', LoginView.as_view(), name='login'),
    path('auth/refresh/', RefreshView.as_view(), name='refresh'),
    path('auth/me/', MeView.as_view(), name='me'),

    path('users/', UserListCreateView.as_view(), name='user-list'),
    path('users/<int:pk>/', UserDetailView.as_view(), name='user-detail'),

    path('audit-logs/', AuditLogListView.as_view(), name='audit-log-list'),
]
