"""Portal endpoints for physicians and patients outside the lab."""

import logging

from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from labwise_backend.core.serializers import LoginSerializer
from labwise_backend.core.utils import log_action
from labwise_backend.core.views import authenticate_by_email, issue_tokens
from labwise_backend.orders.serializers import OrderSerializer
from labwise_backend.orders.views import order_queryset, scope_to_user

from .permissions import PORTAL_ROLES, PortalPermission

logger = logging.getLogger(__name__)


class PortalLoginView(APIView):
    """
    POST /api/v1/portal/auth/login/

    Same credentials as the staff login; staff accounts are refused with 403.
    """
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate_by_email(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )
        if user.role_name not in PORTAL_ROLES:
            logger.warning('Portal login refused for user %s (role %s)', user.pk, user.role_name)
            raise PermissionDenied('Access denied. This portal is for physicians and patients only.')

        log_action(user, 'PORTAL_USER_LOGIN', 'User', user.pk, request=request)
        return Response(issue_tokens(user), status=status.HTTP_200_OK)


class PortalOrdersView(APIView):
    """GET /api/v1/portal/orders/ - the caller's own orders, newest first."""
    permission_classes = [PortalPermission]

    def get(self, request, *args, **kwargs):
        orders = scope_to_user(order_queryset(), request.user).order_by('-created_at', '-id')[:50]
        return Response(OrderSerializer(orders, many=True).data, status=status.HTTP_200_OK)
