"""Order entry and order re-derivation.

Tests are grouped into one sample per specimen tube type. When an order is
edited, samples whose tube type survives the edit keep their collection
state (status, timestamps, accession number) and the results of tests that
are still ordered; new tube types start awaiting collection.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from labwise_backend.appointments.models import Appointment
from labwise_backend.appointments.scheduling import ensure_slot_available
from labwise_backend.catalog.models import TestCatalogItem
from labwise_backend.core.counters import next_order_id
from labwise_backend.core.models import Role, User
from labwise_backend.patients.models import Patient

from .exceptions import InvalidOrderData, UnknownTestCodesError
from .models import Order, OrderSample, OrderTest
from .workflow import recompute_order_status

logger = logging.getLogger(__name__)


def resolve_physician(physician_id: int) -> User | None:
	return User.objects.filter(id=physician_id, role__name=Role.PHYSICIAN).first()


def resolve_patient(patient_id: int) -> Patient | None:
	return Patient.objects.filter(id=patient_id).first()


def load_catalog(codes: list[str]) -> dict[str, TestCatalogItem]:
	"""Active catalog entries for ``codes``; unknown or inactive codes raise."""
	found = {
		item.test_code: item
		for item in TestCatalogItem.objects.filter(test_code__in=codes, is_active=True)
	}
	missing = [code for code in codes if code not in found]
	if missing:
		raise UnknownTestCodesError(missing)
	return found


def group_by_tube_type(codes: list[str], catalog: dict[str, TestCatalogItem]) -> dict[str, list[TestCatalogItem]]:
	"""Catalog definitions keyed by tube type, in the order codes were given."""
	groups: dict[str, list[TestCatalogItem]] = {}
	for code in codes:
		item = catalog[code]
		groups.setdefault(item.tube_type, []).append(item)
	return groups


def snapshot_test(item: TestCatalogItem, patient: Patient) -> dict[str, Any]:
	"""Fields copied from the catalog onto a new ``OrderTest``."""
	ref = item.reference_range_for(age=patient.age_on(), gender=patient.gender or None)
	if ref is not None:
		reference_range = f"{ref.get('range_low')} - {ref.get('range_high')}"
		units = ref.get('units') or ''
	else:
		reference_range = 'N/A'
		units = ''
	return {
		'test_code': item.test_code,
		'name': item.name,
		'reference_range': reference_range,
		'result_units': units,
		'status': OrderTest.STATUS_PENDING,
	}


def _add_tests(sample: OrderSample, items: list[TestCatalogItem], patient: Patient) -> None:
	OrderTest.objects.bulk_create([
		OrderTest(sample=sample, **snapshot_test(item, patient))
		for item in items
	])


def _book_appointment(
	*,
	order: Order,
	details: dict,
	appointment: Appointment | None = None,
) -> Appointment:
	"""Create or move the order's collection appointment after an overlap check."""
	duration = details.get('duration_minutes')
	if duration is None:
		duration = appointment.duration_minutes if appointment else Appointment.DEFAULT_DURATION_MINUTES

	ensure_slot_available(
		start_time=details['scheduled_time'],
		duration_minutes=duration,
		exclude_appointment_id=appointment.id if appointment else None,
	)

	if appointment is None:
		appointment = Appointment(
			patient=order.patient,
			order=order,
			appointment_type=Appointment.TYPE_SAMPLE_COLLECTION,
			status=Appointment.STATUS_SCHEDULED,
		)
	appointment.scheduled_time = details['scheduled_time']
	appointment.duration_minutes = duration
	if 'notes' in details:
		appointment.notes = details['notes']
	appointment.save()
	return appointment


def create_order(
	*,
	patient_id: int,
	physician_id: int,
	icd10_code: str,
	priority: str,
	test_codes: list[str],
	appointment_details: dict | None = None,
	user: User | None = None,
) -> Order:
	"""
	Create an order with one sample per tube type.

	Samples are derived from the catalog tube types of ``test_codes``, so an
	order never holds two samples of the same type.

	Raises:
		Patient.DoesNotExist / User.DoesNotExist: unknown patient or physician
		UnknownTestCodesError: codes missing from the active catalog
		SchedulingConflictError: the collection appointment overlaps another
	"""
	patient = resolve_patient(patient_id)
	if patient is None:
		raise Patient.DoesNotExist('Patient not found.')
	physician = resolve_physician(physician_id)
	if physician is None:
		raise User.DoesNotExist('Physician not found.')

	catalog = load_catalog(test_codes)
	groups = group_by_tube_type(test_codes, catalog)

	with transaction.atomic():
		order = Order.objects.create(
			order_id=next_order_id(),
			patient=patient,
			physician=physician,
			icd10_code=icd10_code,
			priority=priority,
			created_by=user if getattr(user, 'is_authenticated', False) else None,
		)
		for tube_type, items in groups.items():
			sample = OrderSample.objects.create(order=order, sample_type=tube_type)
			_add_tests(sample, items, patient)

		if appointment_details:
			_book_appointment(order=order, details=appointment_details)

	logger.info('Order %s created for patient %s (%s samples)', order.order_id, patient.mrn, len(groups))
	return order


def _sync_sample_tests(sample: OrderSample, items: list[TestCatalogItem], patient: Patient) -> None:
	wanted = {item.test_code for item in items}
	existing = {test.test_code: test for test in sample.tests.all()}

	removed = [test.id for code, test in existing.items() if code not in wanted]
	if removed:
		OrderTest.objects.filter(id__in=removed).delete()

	_add_tests(sample, [item for item in items if item.test_code not in existing], patient)


def update_order(
	order: Order,
	*,
	physician_id: int,
	icd10_code: str,
	test_codes: list[str],
	appointment_details: dict,
	priority: str | None = None,
	patient_id: int | None = None,
) -> Order:
	"""
	Re-derive an order's samples from a new test list.

	All checks (physician, codes, appointment overlap) run before anything
	is written, and the writes share one transaction, so a rejected edit
	leaves the order untouched.
	"""
	if patient_id is not None and patient_id != order.patient_id:
		raise InvalidOrderData('An order cannot be moved to another patient.', field='patient_id')

	physician = resolve_physician(physician_id)
	if physician is None:
		raise User.DoesNotExist('Physician not found.')

	catalog = load_catalog(test_codes)
	groups = group_by_tube_type(test_codes, catalog)

	with transaction.atomic():
		appointment = order.appointments.order_by('id').first()
		_book_appointment(order=order, details=appointment_details, appointment=appointment)

		existing = {sample.sample_type: sample for sample in order.samples.prefetch_related('tests')}
		for tube_type, items in groups.items():
			sample = existing.get(tube_type)
			if sample is None:
				sample = OrderSample.objects.create(order=order, sample_type=tube_type)
				_add_tests(sample, items, order.patient)
			else:
				_sync_sample_tests(sample, items, order.patient)

		dropped = [sample.id for tube_type, sample in existing.items() if tube_type not in groups]
		if dropped:
			OrderSample.objects.filter(id__in=dropped).delete()

		order.physician = physician
		order.icd10_code = icd10_code
		if priority:
			order.priority = priority
		order.save()
		recompute_order_status(order)

	logger.info('Order %s updated (%s samples)', order.order_id, len(groups))
	return order
