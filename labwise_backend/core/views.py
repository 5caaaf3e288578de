"""Core app views.

Contains:
- health: database health check
- LoginView: JWT token obtain with user/role info
- RefreshView: JWT token refresh
- MeView: current authenticated user info
- User management and the audit log listing
"""

import logging

from django.contrib.auth.models import update_last_login
from django.db import connection
from django.http import JsonResponse

from rest_framework import generics, status
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from labwise_backend.core.exceptions import Conflict
from labwise_backend.core.models import AuditLog, User
from labwise_backend.core.permissions import AuditLogPermission, UserPermission
from labwise_backend.core.serializers import (
    AuditLogSerializer,
    LoginSerializer,
    RefreshSerializer,
    UserMeSerializer,
    UserSerializer,
    UserWriteSerializer,
)
from labwise_backend.core.utils import log_action

logger = logging.getLogger(__name__)


def health(request):
    """Health check endpoint - no authentication required."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1;')
        user_count = User.objects.count()
    except Exception as exc:
        logger.exception('Database health check failed')
        return JsonResponse({'status': 'error', 'detail': str(exc)}, status=503)

    return JsonResponse({'status': 'ok', 'database': 'connected', 'user_count': user_count})


def authenticate_by_email(email, password):
    """Resolve credentials to an active user or raise the matching API error."""
    user = User.objects.select_related('role').filter(email__iexact=email).first()
    if user is None or not user.check_password(password):
        raise AuthenticationFailed('Invalid email or password.')
    if not user.is_active:
        raise PermissionDenied('Your account has been deactivated.')
    return user


def issue_tokens(user):
    """Build the login response body with a ``role`` claim on both tokens."""
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role_name
    access = refresh.access_token
    update_last_login(None, user)

    return {
        'user': UserMeSerializer(user).data,
        'access': str(access),
        'refresh': str(refresh),
    }


class LoginView(APIView):
    """Obtain JWT access and refresh tokens.

    POST /api/v1/auth/login/
    Body: {"email": "...", "password": "..."}
    Returns: {"user": {...}, "access": "...", "refresh": "..."}
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate_by_email(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )
        logger.info('User %s logged in', user.pk)
        return Response(issue_tokens(user), status=status.HTTP_200_OK)


class RefreshView(APIView):
    """Refresh JWT access token.

    POST /api/v1/auth/refresh/
    Body: {"refresh": "..."}
    Returns: {"access": "..."}
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            refresh = RefreshToken(serializer.validated_data['refresh'])
        except TokenError as exc:
            raise AuthenticationFailed(str(exc))

        return Response({'access': str(refresh.access_token)}, status=status.HTTP_200_OK)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        serializer = UserMeSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)


class UserListCreateView(generics.ListCreateAPIView):
    """List users (optionally ``?role=``) or create a new account."""

    permission_classes = [UserPermission]

    def get_queryset(self):
        qs = User.objects.select_related('role').all()
        role = self.request.query_params.get('role')
        if role:
            qs = qs.filter(role__name=role)
        return qs

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserWriteSerializer
        return UserSerializer

    def create(self, request, *args, **kwargs):
        email = str(request.data.get('email') or '').strip()
        if email and User.objects.filter(email__iexact=email).exists():
            raise Conflict('A user with this email already exists.')

        write_serializer = UserWriteSerializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        user = write_serializer.save()
        log_action(request.user, 'USER_CREATE', 'User', user.pk, request=request)

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserDetailView(generics.RetrieveUpdateDestroyAPIView):
    """Retrieve, update or deactivate a user. DELETE never removes the row."""

    permission_classes = [UserPermission]
    queryset = User.objects.select_related('role').all()

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return UserWriteSerializer
        return UserSerializer

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        user = self.get_object()

        email = str(request.data.get('email') or '').strip()
        if email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            raise Conflict('A user with this email already exists.')

        write_serializer = UserWriteSerializer(user, data=request.data, partial=partial)
        write_serializer.is_valid(raise_exception=True)
        updated = write_serializer.save()
        log_action(request.user, 'USER_UPDATE', 'User', updated.pk, request=request)

        return Response(UserSerializer(updated).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        user.is_active = False
        user.save(update_fields=['is_active'])
        log_action(request.user, 'USER_DEACTIVATE', 'User', user.pk, request=request)
        return Response({'detail': 'User deactivated successfully.'}, status=status.HTTP_200_OK)


class AuditLogListView(generics.ListAPIView):
    """Newest 100 audit entries, filterable by ``?action=`` and ``?entity_id=``."""

    permission_classes = [AuditLogPermission]
    serializer_class = AuditLogSerializer

    def get_queryset(self):
        qs = AuditLog.objects.select_related('user', 'user__role').order_by('-timestamp', '-id')
        action = self.request.query_params.get('action')
        if action and action != 'All':
            qs = qs.filter(action=action)
        entity_id = self.request.query_params.get('entity_id')
        if entity_id:
            qs = qs.filter(entity_id=entity_id)
        return qs[:100]
