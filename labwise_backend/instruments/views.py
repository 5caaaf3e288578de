import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone

from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from labwise_backend.core.utils import log_action

from .models import Instrument, MaintenanceLog, QCLog
from .permissions import InstrumentPermission, QCLogPermission
from .serializers import (
    CorrectiveActionSerializer,
    InstrumentDetailSerializer,
    InstrumentSerializer,
    MaintenanceLogSerializer,
    QCLogSerializer,
)

logger = logging.getLogger(__name__)


class InstrumentListCreateView(generics.ListCreateAPIView):
    permission_classes = [InstrumentPermission]
    serializer_class = InstrumentSerializer
    queryset = Instrument.objects.all()

    def perform_create(self, serializer):
        instrument = serializer.save()
        log_action(self.request.user, 'INSTRUMENT_CREATE', 'Instrument', instrument.instrument_id, request=self.request)


class InstrumentDetailView(generics.RetrieveUpdateDestroyAPIView):
    permission_classes = [InstrumentPermission]
    queryset = Instrument.objects.prefetch_related('maintenance_logs__performed_by')

    def get_serializer_class(self):
        if self.request.method == 'GET':
            return InstrumentDetailSerializer
        return InstrumentSerializer

    def perform_update(self, serializer):
        instrument = serializer.save()
        log_action(self.request.user, 'INSTRUMENT_UPDATE', 'Instrument', instrument.instrument_id, request=self.request)

    def destroy(self, request, *args, **kwargs):
        instrument = self.get_object()
        instrument_id = instrument.instrument_id
        instrument.delete()
        log_action(request.user, 'INSTRUMENT_DELETE', 'Instrument', instrument_id, request=request)
        return Response({'detail': 'Instrument deleted successfully.'}, status=status.HTTP_200_OK)


class MaintenanceLogListCreateView(generics.ListCreateAPIView):
    """
    GET/POST /api/v1/instruments/<id>/logs/

    A Calibration entry also moves the instrument's last calibration date.
    """
    permission_classes = [InstrumentPermission]
    serializer_class = MaintenanceLogSerializer

    def get_instrument(self):
        return get_object_or_404(Instrument, pk=self.kwargs['pk'])

    def get_queryset(self):
        return MaintenanceLog.objects.filter(instrument_id=self.kwargs['pk']).select_related('performed_by')

    def create(self, request, *args, **kwargs):
        instrument = self.get_instrument()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = serializer.save(instrument=instrument, performed_by=request.user)

        if entry.log_type == MaintenanceLog.TYPE_CALIBRATION:
            instrument.last_calibration_date = timezone.localdate()
            instrument.save(update_fields=['last_calibration_date', 'updated_at'])

        log_action(
            request.user, 'MAINTENANCE_LOG_CREATE', 'Instrument', instrument.instrument_id,
            details={'log_id': entry.id, 'log_type': entry.log_type},
            request=request,
        )
        return Response(self.get_serializer(entry).data, status=status.HTTP_201_CREATED)


class QCLogListCreateView(generics.ListCreateAPIView):
    """
    GET: latest 50 QC runs, optionally ``?instrument=<id>`` and ``?test_code=``.
    POST: record a run; pass/fail follows the Westgard 1-2s rule.
    """
    permission_classes = [QCLogPermission]
    serializer_class = QCLogSerializer

    def get_queryset(self):
        qs = QCLog.objects.select_related('instrument', 'performed_by')
        params = self.request.query_params
        if params.get('instrument'):
            if not params['instrument'].isdigit():
                raise ValidationError({'instrument': 'Expected a numeric instrument id.'})
            qs = qs.filter(instrument_id=params['instrument'])
        if params.get('test_code'):
            qs = qs.filter(test_code=params['test_code'].strip().upper())
        return qs.order_by('-run_timestamp', '-id')[:50]

    def perform_create(self, serializer):
        qc_log = serializer.save(performed_by=self.request.user)
        if not qc_log.is_pass:
            logger.warning(
                'QC failure on %s for %s: %s (mean %s, sd %s)',
                qc_log.instrument.instrument_id, qc_log.test_code,
                qc_log.result_value, qc_log.mean, qc_log.sd,
            )
        log_action(
            self.request.user, 'QC_LOG_CREATE', 'QCLog', qc_log.id,
            details={'test_code': qc_log.test_code, 'is_pass': qc_log.is_pass},
            request=self.request,
        )


class QCLogDetailView(generics.RetrieveUpdateAPIView):
    """PUT records the corrective action taken after a QC run."""
    permission_classes = [QCLogPermission]
    serializer_class = QCLogSerializer
    queryset = QCLog.objects.select_related('instrument', 'performed_by')

    def update(self, request, *args, **kwargs):
        qc_log = self.get_object()
        action_serializer = CorrectiveActionSerializer(data=request.data)
        action_serializer.is_valid(raise_exception=True)

        qc_log.corrective_action = action_serializer.validated_data['corrective_action']
        qc_log.corrective_action_by = request.user
        qc_log.corrective_action_at = timezone.now()
        qc_log.save(update_fields=['corrective_action', 'corrective_action_by', 'corrective_action_at'])

        log_action(request.user, 'QC_CORRECTIVE_ACTION', 'QCLog', qc_log.id, request=request)
        return Response(QCLogSerializer(qc_log).data, status=status.HTTP_200_OK)
