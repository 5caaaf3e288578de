"""Appointment overlap checks and the denormalized day view.

Overlap rule: a window ``[start, start + duration)`` conflicts with an
existing appointment when that appointment starts before the window ends and
ends after the window starts. NoShow appointments do not block a slot.

The check is one query without row locking; two concurrent writers can
still book the same slot.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from django.db.models import Prefetch
from django.utils import timezone

from labwise_backend.catalog.models import TestCatalogItem
from labwise_backend.orders.models import Order, OrderSample
from labwise_backend.orders.serializers import OrderSerializer, PatientBriefSerializer

from .exceptions import Conflict, InvalidSchedulingData, SchedulingConflictError
from .models import Appointment

logger = logging.getLogger(__name__)


def iso_z(dt: datetime) -> str:
	value = dt.isoformat()
	return value.replace('+00:00', 'Z')


def check_appointment_conflicts(
	*,
	start_time: datetime,
	duration_minutes: int,
	exclude_appointment_id: int | None = None,
) -> list[Conflict]:
	"""
	Return the appointments overlapping the requested window.

	Args:
		start_time: Requested start
		duration_minutes: Requested length
		exclude_appointment_id: The appointment being edited, if any

	Returns:
		List of Conflict objects. Empty list means the slot is free.
	"""
	if duration_minutes is None or duration_minutes <= 0:
		raise InvalidSchedulingData('duration_minutes must be positive.', field='duration_minutes')

	end_time = start_time + timedelta(minutes=duration_minutes)

	overlapping = Appointment.objects.filter(
		scheduled_time__lt=end_time,
		end_time__gt=start_time,
	).exclude(status=Appointment.STATUS_NO_SHOW)
	if exclude_appointment_id is not None:
		overlapping = overlapping.exclude(id=exclude_appointment_id)

	conflicts: list[Conflict] = []
	for appt in overlapping.order_by('scheduled_time', 'id'):
		conflicts.append(Conflict(
			type='appointment_overlap',
			model='Appointment',
			id=appt.id,
			message=f'Overlaps appointment #{appt.id}',
			meta={
				'patient_id': appt.patient_id,
				'scheduled_time': iso_z(appt.scheduled_time),
				'end_time': iso_z(appt.end_time),
			},
		))
	return conflicts


def ensure_slot_available(
	*,
	start_time: datetime,
	duration_minutes: int,
	exclude_appointment_id: int | None = None,
) -> None:
	"""Raise ``SchedulingConflictError`` if the window overlaps another appointment."""
	conflicts = check_appointment_conflicts(
		start_time=start_time,
		duration_minutes=duration_minutes,
		exclude_appointment_id=exclude_appointment_id,
	)
	if conflicts:
		logger.info(
			'Rejected slot %s (+%s min): %s conflict(s)',
			iso_z(start_time), duration_minutes, len(conflicts),
		)
		raise SchedulingConflictError(
			conflicts,
			message='Appointment time conflicts with an existing appointment.',
		)


def day_bounds(day: date) -> tuple[datetime, datetime]:
	"""Start and end of ``day`` in the server timezone."""
	tz = timezone.get_current_timezone()
	start = timezone.make_aware(datetime.combine(day, time.min), tz)
	return start, start + timedelta(days=1)


def parse_day(value: str | None) -> date:
	"""Parse ``YYYY-MM-DD``; anything else falls back to today."""
	if value:
		try:
			return date.fromisoformat(value)
		except ValueError:
			logger.debug('Ignoring malformed date filter %r', value)
	return timezone.localdate()


# -----------------------------------------------------------------------------
# Day view aggregation
# -----------------------------------------------------------------------------


def _order_prefetch():
	return Prefetch(
		'samples',
		queryset=OrderSample.objects.prefetch_related('tests'),
	)


def _catalog_for(orders) -> dict[str, TestCatalogItem]:
	codes = {
		test.test_code
		for order in orders
		for sample in order.samples.all()
		for test in sample.tests.all()
	}
	if not codes:
		return {}
	return {item.test_code: item for item in TestCatalogItem.objects.filter(test_code__in=codes)}


def _enrich_order(order_data: dict, catalog: dict[str, TestCatalogItem]) -> dict:
	"""Attach catalog specimen requirements to tests and a summary to each sample."""
	for sample in order_data.get('samples', []):
		handling = []
		for test in sample.get('tests', []):
			definition = catalog.get(test['test_code'])
			test['specimen_requirements'] = definition.specimen_requirements if definition else None
			if definition and definition.special_handling and definition.special_handling not in handling:
				handling.append(definition.special_handling)
		sample['specimen_summary'] = {
			'tube_type': sample['sample_type'],
			'special_handling': '; '.join(handling),
		}
	return order_data


def build_day_view(appointments: list[Appointment], appointment_data: list[dict]) -> list[dict]:
	"""
	Denormalize serialized appointments for the scheduling screen.

	Each entry gains ``patient_info``, ``order_info`` (the linked order) and
	``pending_orders`` (the patient's Pending orders still awaiting
	collection). Catalog definitions for all tests on the page are fetched
	in a single query.
	"""
	patient_ids = {appt.patient_id for appt in appointments}

	pending_by_patient: dict[int, list[Order]] = {}
	if patient_ids:
		pending = (
			Order.objects.filter(
				patient_id__in=patient_ids,
				order_status=Order.STATUS_PENDING,
				samples__status=OrderSample.STATUS_AWAITING_COLLECTION,
			)
			.distinct()
			.select_related('patient', 'physician')
			.prefetch_related(_order_prefetch(), 'appointments')
			.order_by('-created_at', '-id')
		)
		for order in pending:
			pending_by_patient.setdefault(order.patient_id, []).append(order)

	linked_orders = [appt.order for appt in appointments if appt.order is not None]
	all_orders = linked_orders + [o for orders in pending_by_patient.values() for o in orders]
	catalog = _catalog_for(all_orders)

	result = []
	for appt, data in zip(appointments, appointment_data):
		entry = dict(data)
		entry['patient_info'] = PatientBriefSerializer(appt.patient).data if appt.patient_id else None
		entry['order_info'] = (
			_enrich_order(OrderSerializer(appt.order).data, catalog) if appt.order is not None else None
		)
		entry['pending_orders'] = [
			_enrich_order(OrderSerializer(order).data, catalog)
			for order in pending_by_patient.get(appt.patient_id, [])
		]
		result.append(entry)
	return result


def appointments_for_day_queryset(day: date):
	start, end = day_bounds(day)
	return (
		Appointment.objects.filter(scheduled_time__gte=start, scheduled_time__lt=end)
		.select_related('patient', 'order', 'order__patient', 'order__physician')
		.prefetch_related(
			Prefetch('order__samples', queryset=OrderSample.objects.prefetch_related('tests')),
			'order__appointments',
		)
		.order_by('scheduled_time', 'id')
	)
