from django.core.exceptions import ObjectDoesNotExist
from django.db.models import Prefetch, Q
from django.http import HttpResponse

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from labwise_backend.appointments.exceptions import InvalidSchedulingData, SchedulingConflictError
from labwise_backend.core.permissions import role_name_of
from labwise_backend.core.utils import log_action
from labwise_backend.orders import services, workflow
from labwise_backend.orders.exceptions import OrderError, SampleStateError
from labwise_backend.orders.models import Order, OrderSample
from labwise_backend.orders.permissions import (
	LabBenchPermission,
	OrderDetailPermission,
	OrderPermission,
)
from labwise_backend.orders.reports import OrderReportPDF
from labwise_backend.orders.serializers import (
	OrderCreateSerializer,
	OrderSerializer,
	OrderUpdateSerializer,
	SampleActionSerializer,
	SampleRejectSerializer,
	VerifyResultsSerializer,
)


def order_queryset():
	return (
		Order.objects.select_related('patient', 'physician')
		.prefetch_related(
			Prefetch('samples', queryset=OrderSample.objects.prefetch_related('tests')),
			'appointments',
		)
	)


def scope_to_user(qs, user):
	"""Physicians and patients only ever list their own orders."""
	role_name = role_name_of(user)
	if role_name == 'physician':
		return qs.filter(physician=user)
	if role_name == 'patient':
		return qs.filter(patient__user=user)
	return qs


def _service_error_response(exc):
	"""Translate order/scheduling service exceptions to HTTP responses."""
	if isinstance(exc, ObjectDoesNotExist):
		return Response({'detail': str(exc) or 'Not found.'}, status=status.HTTP_404_NOT_FOUND)
	if isinstance(exc, SchedulingConflictError):
		return Response(exc.to_dict(), status=status.HTTP_409_CONFLICT)
	return Response(exc.to_dict(), status=status.HTTP_400_BAD_REQUEST)


class OrderListCreateView(generics.ListCreateAPIView):
	"""
	GET: newest 50 orders. ``?q=`` searches order id, accession numbers and
	patient MRN, name and phone.
	POST: order entry.
	"""
	permission_classes = [OrderPermission]

	def get_queryset(self):
		qs = scope_to_user(order_queryset(), self.request.user)
		q = self.request.query_params.get('q', '').strip()
		if q:
			matching = Order.objects.filter(
				Q(order_id__icontains=q)
				| Q(samples__accession_number__icontains=q)
				| Q(patient__mrn__icontains=q)
				| Q(patient__first_name__icontains=q)
				| Q(patient__last_name__icontains=q)
				| Q(patient__phone__icontains=q)
			).values('id')
			qs = qs.filter(id__in=matching)
		return qs.order_by('-created_at', '-id')[:50]

	def get_serializer_class(self):
		if self.request.method == 'POST':
			return OrderCreateSerializer
		return OrderSerializer

	def create(self, request, *args, **kwargs):
		write_serializer = OrderCreateSerializer(data=request.data)
		write_serializer.is_valid(raise_exception=True)
		data = write_serializer.validated_data

		try:
			order = services.create_order(
				patient_id=data['patient_id'],
				physician_id=data['physician_id'],
				icd10_code=data['icd10_code'],
				priority=data['priority'],
				test_codes=data['all_test_codes'],
				appointment_details=data.get('appointment_details'),
				user=request.user,
			)
		except (ObjectDoesNotExist, OrderError, SchedulingConflictError, InvalidSchedulingData) as e:
			return _service_error_response(e)

		log_action(
			request.user, 'ORDER_CREATE', 'Order', order.order_id,
			patient_id=order.patient_id, request=request,
		)
		order = order_queryset().get(pk=order.pk)
		return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(generics.RetrieveUpdateAPIView):
	permission_classes = [OrderDetailPermission]

	def get_queryset(self):
		return order_queryset()

	def get_serializer_class(self):
		if self.request.method in ('PUT', 'PATCH'):
			return OrderUpdateSerializer
		return OrderSerializer

	def update(self, request, *args, **kwargs):
		order = self.get_object()

		write_serializer = OrderUpdateSerializer(data=request.data)
		write_serializer.is_valid(raise_exception=True)
		data = write_serializer.validated_data

		try:
			services.update_order(
				order,
				physician_id=data['physician_id'],
				icd10_code=data['icd10_code'],
				test_codes=data['test_codes'],
				appointment_details=data['appointment_details'],
				priority=data.get('priority'),
				patient_id=data.get('patient_id'),
			)
		except (ObjectDoesNotExist, OrderError, SchedulingConflictError, InvalidSchedulingData) as e:
			return _service_error_response(e)

		log_action(
			request.user, 'ORDER_UPDATE', 'Order', order.order_id,
			patient_id=order.patient_id, details={'test_codes': data['test_codes']}, request=request,
		)
		order = order_queryset().get(pk=order.pk)
		return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class OrderPDFView(generics.GenericAPIView):
	"""GET the printable lab report of an order."""
	permission_classes = [OrderPermission]

	def get_queryset(self):
		return order_queryset()

	def get(self, request, *args, **kwargs):
		order = self.get_object()
		pdf = OrderReportPDF(order).generate()
		log_action(request.user, 'ORDER_REPORT_VIEW', 'Order', order.order_id, patient_id=order.patient_id, request=request)

		response = HttpResponse(pdf, content_type='application/pdf')
		response['Content-Disposition'] = f'inline; filename="{order.order_id}.pdf"'
		return response


class SampleAccessionView(APIView):
	"""
	POST /api/v1/samples/accession/
	Body: {"order_id": "...", "sample_id": ...}
	"""
	permission_classes = [LabBenchPermission]

	def post(self, request, *args, **kwargs):
		serializer = SampleActionSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)

		sample = workflow.find_sample(serializer.validated_data['order_id'], serializer.validated_data['sample_id'])
		if sample is None:
			return Response({'detail': 'Sample not found.'}, status=status.HTTP_404_NOT_FOUND)

		try:
			workflow.accession_sample(sample)
		except SampleStateError as e:
			return Response(e.to_dict(), status=status.HTTP_409_CONFLICT)

		log_action(
			request.user, 'SAMPLE_ACCESSIONED', 'Order', sample.order.order_id,
			patient_id=sample.order.patient_id,
			details={'sample_id': sample.id, 'accession_number': sample.accession_number},
			request=request,
		)
		return Response(
			{
				'message': 'Sample accessioned successfully.',
				'accession_number': sample.accession_number,
				'new_status': sample.status,
			},
			status=status.HTTP_200_OK,
		)


class SampleRejectView(APIView):
	permission_classes = [LabBenchPermission]

	def post(self, request, *args, **kwargs):
		serializer = SampleRejectSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		data = serializer.validated_data

		sample = workflow.find_sample(data['order_id'], data['sample_id'])
		if sample is None:
			return Response({'detail': 'Sample not found.'}, status=status.HTTP_404_NOT_FOUND)

		workflow.reject_sample(sample, reason=data['reason'], user=request.user)
		log_action(
			request.user, 'SAMPLE_REJECTED', 'Order', sample.order.order_id,
			patient_id=sample.order.patient_id,
			details={'sample_id': sample.id, 'reason': data['reason']},
			request=request,
		)
		return Response(
			{'message': 'Sample rejected.', 'new_status': sample.status},
			status=status.HTTP_200_OK,
		)


class VerifyResultsView(APIView):
	"""
	POST /api/v1/results/verify/
	Body: {"accession_number": "...", "results": [{"test_code", "value", "notes"}]}
	"""
	permission_classes = [LabBenchPermission]

	def post(self, request, *args, **kwargs):
		serializer = VerifyResultsSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		data = serializer.validated_data

		sample = (
			OrderSample.objects.select_related('order', 'order__patient')
			.filter(accession_number=data['accession_number'])
			.first()
		)
		if sample is None:
			return Response({'detail': 'Sample not found.'}, status=status.HTTP_404_NOT_FOUND)

		try:
			outcome = workflow.verify_results(sample, data['results'], user=request.user)
		except SampleStateError as e:
			return Response(e.to_dict(), status=status.HTTP_409_CONFLICT)

		log_action(
			request.user, 'RESULTS_VERIFIED', 'Order', sample.order.order_id,
			patient_id=sample.order.patient_id,
			details={'accession_number': sample.accession_number, 'tests': outcome['verified_tests']},
			request=request,
		)
		return Response({'message': 'Results verified.', **outcome}, status=status.HTTP_200_OK)


class WorklistView(APIView):
	permission_classes = [LabBenchPermission]

	def get(self, request, *args, **kwargs):
		return Response(workflow.worklist_rows(limit=100), status=status.HTTP_200_OK)
