from django.db.models import Q
from django.shortcuts import get_object_or_404

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from labwise_backend.core.utils import log_action
from labwise_backend.patients.models import Patient
from labwise_backend.patients.permissions import (
    EligibilityPermission,
    PatientDetailPermission,
    PatientListPermission,
)
from labwise_backend.patients.serializers import (
    EligibilityRequestSerializer,
    PatientReadSerializer,
    PatientWriteSerializer,
)
from labwise_backend.patients.tasks import verify_insurance_eligibility


class PatientListCreateView(generics.ListCreateAPIView):
    """Search patients (``?q=`` over MRN, name, phone) or register a new one."""

    permission_classes = [PatientListPermission]

    def get_queryset(self):
        qs = Patient.objects.all()
        q = self.request.query_params.get('q', '').strip()
        if q:
            qs = qs.filter(
                Q(mrn__icontains=q)
                | Q(first_name__icontains=q)
                | Q(last_name__icontains=q)
                | Q(phone__icontains=q)
            )
        return qs.order_by('last_name', 'first_name', 'id')[:50]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PatientWriteSerializer
        return PatientReadSerializer

    def create(self, request, *args, **kwargs):
        write_serializer = PatientWriteSerializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        patient = write_serializer.save()
        log_action(request.user, 'PATIENT_CREATE', 'Patient', patient.mrn, patient_id=patient.pk, request=request)

        return Response(PatientReadSerializer(patient).data, status=status.HTTP_201_CREATED)


class PatientRetrieveUpdateView(generics.RetrieveUpdateAPIView):
    """Retrieve or update a patient."""

    permission_classes = [PatientDetailPermission]
    queryset = Patient.objects.all()

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return PatientWriteSerializer
        return PatientReadSerializer

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        patient = self.get_object()

        write_serializer = PatientWriteSerializer(patient, data=request.data, partial=partial)
        write_serializer.is_valid(raise_exception=True)
        updated = write_serializer.save()
        log_action(request.user, 'PATIENT_UPDATE', 'Patient', updated.mrn, patient_id=updated.pk, request=request)

        return Response(PatientReadSerializer(updated).data, status=status.HTTP_200_OK)


class VerifyEligibilityView(APIView):
    """Queue an insurance eligibility check.

    POST /api/v1/verify-eligibility/
    Body: {"patient_id": ..., "policy_number": "..."}
    Returns 202: {"message": "...", "job_id": "...", "status": "Queued"}
    """

    permission_classes = [EligibilityPermission]

    def post(self, request, *args, **kwargs):
        serializer = EligibilityRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        patient = get_object_or_404(Patient, pk=serializer.validated_data['patient_id'])

        job = verify_insurance_eligibility.delay(patient.pk, serializer.validated_data['policy_number'])
        log_action(request.user, 'ELIGIBILITY_CHECK_QUEUED', 'Patient', patient.mrn, patient_id=patient.pk, request=request)

        return Response(
            {
                'message': 'Eligibility verification has been queued.',
                'job_id': job.id,
                'status': 'Queued',
            },
            status=status.HTTP_202_ACCEPTED,
        )
