from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from labwise_backend.core.utils import log_action
from labwise_backend.orders import workflow
from labwise_backend.orders.models import Order

from .exceptions import InvalidSchedulingData, SchedulingConflictError
from .models import Appointment
from .permissions import (
	AppointmentDetailPermission,
	AppointmentPermission,
	SampleCollectionPermission,
)
from .scheduling import (
	appointments_for_day_queryset,
	build_day_view,
	ensure_slot_available,
	parse_day,
)
from .serializers import AppointmentCreateUpdateSerializer, AppointmentSerializer


class AppointmentListCreateView(generics.ListCreateAPIView):
	"""
	GET: one day of appointments (``?date=YYYY-MM-DD``, default today),
	optionally filtered by ``?q=`` (patient name, MRN, notes) and ``?type=``.
	Each entry is denormalized with patient, linked order and pending orders.
	POST: book an appointment; overlapping slots are refused with 409.
	"""
	permission_classes = [AppointmentPermission]

	def get_queryset(self):
		params = self.request.query_params
		qs = appointments_for_day_queryset(parse_day(params.get('date')))

		q = params.get('q', '').strip()
		if q:
			qs = qs.filter(
				Q(patient__first_name__icontains=q)
				| Q(patient__last_name__icontains=q)
				| Q(patient__mrn__icontains=q)
				| Q(notes__icontains=q)
			)

		appointment_type = params.get('type', '').strip()
		if appointment_type and appointment_type != 'All':
			qs = qs.filter(appointment_type=appointment_type)

		return qs[:50]

	def get_serializer_class(self):
		if self.request.method == 'POST':
			return AppointmentCreateUpdateSerializer
		return AppointmentSerializer

	def list(self, request, *args, **kwargs):
		appointments = list(self.get_queryset())
		data = AppointmentSerializer(appointments, many=True).data
		return Response(build_day_view(appointments, data), status=status.HTTP_200_OK)

	def create(self, request, *args, **kwargs):
		write_serializer = AppointmentCreateUpdateSerializer(data=request.data)
		write_serializer.is_valid(raise_exception=True)
		validated_data = write_serializer.validated_data

		try:
			ensure_slot_available(
				start_time=validated_data['scheduled_time'],
				duration_minutes=validated_data['duration_minutes'],
			)
		except SchedulingConflictError as e:
			return Response(e.to_dict(), status=status.HTTP_409_CONFLICT)
		except InvalidSchedulingData as e:
			return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

		appointment = write_serializer.save()
		log_action(
			request.user, 'APPOINTMENT_CREATE', 'Appointment', appointment.id,
			patient_id=appointment.patient_id, request=request,
		)

		appointment = Appointment.objects.select_related('patient', 'order').get(pk=appointment.pk)
		data = build_day_view([appointment], [AppointmentSerializer(appointment).data])[0]
		return Response(data, status=status.HTTP_201_CREATED)


class AppointmentDetailView(generics.RetrieveUpdateDestroyAPIView):
	permission_classes = [AppointmentDetailPermission]
	queryset = Appointment.objects.select_related('patient', 'order')

	def get_serializer_class(self):
		if self.request.method in ('PUT', 'PATCH'):
			return AppointmentCreateUpdateSerializer
		return AppointmentSerializer

	def retrieve(self, request, *args, **kwargs):
		appointment = self.get_object()
		data = build_day_view([appointment], [AppointmentSerializer(appointment).data])[0]
		return Response(data, status=status.HTTP_200_OK)

	def update(self, request, *args, **kwargs):
		partial = kwargs.pop('partial', False)
		appointment = self.get_object()

		write_serializer = AppointmentCreateUpdateSerializer(
			appointment,
			data=request.data,
			partial=partial,
		)
		write_serializer.is_valid(raise_exception=True)
		validated_data = write_serializer.validated_data

		try:
			ensure_slot_available(
				start_time=validated_data.get('scheduled_time', appointment.scheduled_time),
				duration_minutes=validated_data.get('duration_minutes', appointment.duration_minutes),
				exclude_appointment_id=appointment.id,
			)
		except SchedulingConflictError as e:
			return Response(e.to_dict(), status=status.HTTP_409_CONFLICT)
		except InvalidSchedulingData as e:
			return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

		updated = write_serializer.save()
		log_action(
			request.user, 'APPOINTMENT_UPDATE', 'Appointment', updated.id,
			patient_id=updated.patient_id, request=request,
		)
		return Response(AppointmentSerializer(updated).data, status=status.HTTP_200_OK)

	def destroy(self, request, *args, **kwargs):
		appointment = self.get_object()
		appointment_id, patient_id = appointment.id, appointment.patient_id
		appointment.delete()
		log_action(request.user, 'APPOINTMENT_DELETE', 'Appointment', appointment_id, patient_id=patient_id, request=request)
		return Response({'detail': 'Appointment deleted successfully.'}, status=status.HTTP_200_OK)


class CollectSamplesView(APIView):
	"""
	POST /api/v1/appointments/<id>/collect/

	Completes the visit and marks the samples of the patient's pending order
	(the linked order when it is still pending) as Collected.
	"""
	permission_classes = [SampleCollectionPermission]

	def post(self, request, pk, *args, **kwargs):
		appointment = get_object_or_404(Appointment.objects.select_related('order'), pk=pk)

		with transaction.atomic():
			appointment.status = Appointment.STATUS_COMPLETED
			appointment.save(update_fields=['status', 'updated_at'])

			order = appointment.order
			if order is None or order.order_status != Order.STATUS_PENDING:
				order = (
					Order.objects.filter(patient_id=appointment.patient_id, order_status=Order.STATUS_PENDING)
					.order_by('-created_at', '-id')
					.first()
				)
			collected = workflow.collect_pending_samples(order) if order is not None else []

		if order is None:
			return Response(
				{
					'message': 'Collection confirmed, but no pending orders found.',
					'appointment_status': appointment.status,
				},
				status=status.HTTP_200_OK,
			)

		log_action(
			request.user, 'SAMPLE_COLLECTED', 'Order', order.order_id,
			patient_id=order.patient_id,
			details={'appointment_id': appointment.id, 'sample_ids': [s.id for s in collected]},
			request=request,
		)
		return Response(
			{
				'message': 'Samples collected successfully.',
				'order_id': order.order_id,
				'collected_samples': len(collected),
				'order_status': order.order_status,
				'appointment_status': appointment.status,
			},
			status=status.HTTP_200_OK,
		)
