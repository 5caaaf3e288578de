import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .kpis import get_all_kpis
from .permissions import KPIPermission

logger = logging.getLogger(__name__)


class KPIView(APIView):
    """GET /api/v1/reports/kpi/ - lab manager dashboard figures."""
    permission_classes = [KPIPermission]

    def get(self, request, *args, **kwargs):
        kpis = get_all_kpis()
        logger.debug('KPIs computed: %s', kpis)
        return Response(kpis, status=status.HTTP_200_OK)
