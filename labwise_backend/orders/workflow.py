"""Sample lifecycle: collection, accessioning, rejection and result verification.

AwaitingCollection -> Collected -> InLab -> Testing -> Verified, with
Rejected reachable from any state. The order status is recomputed from its
samples after every transition.
"""

from __future__ import annotations

import logging
import operator
from typing import Any

from django.db import transaction
from django.db.models import Case, IntegerField, Q, Value, When
from django.utils import timezone

from labwise_backend.catalog.models import TestCatalogItem
from labwise_backend.core.counters import next_accession_number

from .exceptions import SampleStateError
from .models import Order, OrderSample, OrderTest

logger = logging.getLogger(__name__)

REFLEX_OPERATORS = {
	'gt': operator.gt,
	'lt': operator.lt,
	'eq': operator.eq,
}


def derive_order_status(statuses: list[str], current: str) -> str:
	"""Order status implied by its sample statuses. Cancelled is sticky."""
	if current == Order.STATUS_CANCELLED:
		return current

	active = [s for s in statuses if s != OrderSample.STATUS_REJECTED]
	if not active:
		return current

	awaiting = sum(1 for s in active if s == OrderSample.STATUS_AWAITING_COLLECTION)
	verified = sum(1 for s in active if s in (OrderSample.STATUS_VERIFIED, OrderSample.STATUS_ARCHIVED))

	if awaiting == len(active):
		return Order.STATUS_PENDING
	if verified == len(active):
		return Order.STATUS_COMPLETE
	if awaiting:
		return Order.STATUS_PARTIALLY_COLLECTED
	if verified:
		return Order.STATUS_PARTIALLY_COMPLETE
	return Order.STATUS_IN_PROGRESS


def recompute_order_status(order: Order) -> str:
	statuses = list(order.samples.values_list('status', flat=True))
	new_status = derive_order_status(statuses, order.order_status)
	if new_status != order.order_status:
		logger.info('Order %s: %s -> %s', order.order_id, order.order_status, new_status)
		order.order_status = new_status
		order.save(update_fields=['order_status', 'updated_at'])
	return new_status


def find_sample(order_ref: str, sample_id: int) -> OrderSample | None:
	"""Look up a sample by its id and its order's ``order_id`` (or numeric pk)."""
	order_filter = Q(order__order_id=order_ref)
	if str(order_ref).isdigit():
		order_filter |= Q(order_id=int(order_ref))
	return (
		OrderSample.objects.select_related('order', 'order__patient')
		.filter(order_filter, id=sample_id)
		.first()
	)


def collect_pending_samples(order: Order) -> list[OrderSample]:
	"""Mark every sample awaiting collection as Collected."""
	now = timezone.now()
	with transaction.atomic():
		samples = list(order.samples.filter(status=OrderSample.STATUS_AWAITING_COLLECTION))
		for sample in samples:
			sample.status = OrderSample.STATUS_COLLECTED
			sample.collection_timestamp = now
			sample.save(update_fields=['status', 'collection_timestamp'])
		recompute_order_status(order)
	return samples


def accession_sample(sample: OrderSample) -> OrderSample:
	"""Receive a collected sample in the lab and assign its accession number."""
	if sample.status != OrderSample.STATUS_COLLECTED:
		raise SampleStateError(
			sample_id=sample.id,
			status=sample.status,
			message=f'Sample is in status {sample.status}; only Collected samples can be accessioned.',
		)

	with transaction.atomic():
		sample.accession_number = next_accession_number()
		sample.status = OrderSample.STATUS_IN_LAB
		sample.received_timestamp = timezone.now()
		sample.save(update_fields=['accession_number', 'status', 'received_timestamp'])
		recompute_order_status(sample.order)

	logger.info('Sample %s accessioned as %s', sample.id, sample.accession_number)
	return sample


def reject_sample(sample: OrderSample, *, reason: str, user) -> OrderSample:
	with transaction.atomic():
		sample.status = OrderSample.STATUS_REJECTED
		sample.rejection_reason = reason
		sample.rejected_by = user
		sample.rejected_at = timezone.now()
		sample.save(update_fields=['status', 'rejection_reason', 'rejected_by', 'rejected_at'])
		recompute_order_status(sample.order)

	logger.info('Sample %s rejected: %s', sample.id, reason)
	return sample


def parse_reference_range(text: str) -> tuple[float, float] | None:
	"""``"3.5 - 5.1"`` -> ``(3.5, 5.1)``; ``N/A`` or garbage -> None."""
	low, sep, high = (text or '').partition(' - ')
	if not sep:
		return None
	try:
		return float(low), float(high)
	except ValueError:
		return None


def interpret_result(value: str, reference_range: str) -> tuple[bool, list[str]]:
	"""Abnormal flag and H/L flags for a numeric value against its range."""
	try:
		numeric = float(value)
	except (TypeError, ValueError):
		return False, []
	bounds = parse_reference_range(reference_range)
	if bounds is None:
		return False, []
	low, high = bounds
	if numeric < low:
		return True, ['L']
	if numeric > high:
		return True, ['H']
	return False, []


def _reflex_codes(definition: TestCatalogItem | None, value: str) -> list[str]:
	if definition is None:
		return []
	try:
		numeric = float(value)
	except (TypeError, ValueError):
		return []

	codes = []
	for rule in definition.reflex_rules or []:
		condition = rule.get('condition') or {}
		compare = REFLEX_OPERATORS.get(condition.get('operator'))
		if compare is None or condition.get('test_code', definition.test_code) != definition.test_code:
			continue
		try:
			threshold = float(condition.get('value'))
		except (TypeError, ValueError):
			continue
		if compare(numeric, threshold):
			code = (rule.get('action') or {}).get('add_test_code')
			if code:
				codes.append(code)
	return codes


def _add_reflex_tests(sample: OrderSample, codes: list[str]) -> list[OrderTest]:
	present = set(sample.tests.values_list('test_code', flat=True))
	wanted = [code for code in dict.fromkeys(codes) if code not in present]
	if not wanted:
		return []

	from .services import snapshot_test

	patient = sample.order.patient
	return [
		OrderTest.objects.create(sample=sample, is_reflex=True, **snapshot_test(item, patient))
		for item in TestCatalogItem.objects.filter(test_code__in=wanted, is_active=True)
	]


def verify_results(sample: OrderSample, results: list[dict[str, Any]], *, user) -> dict[str, Any]:
	"""
	Record and verify results for the tests of one sample.

	Entries for codes the sample does not carry are reported back as
	``unknown_tests`` and otherwise ignored. Reflex rules of each verified
	test may add Pending tests to the same sample, which keeps it in Testing.
	"""
	if sample.status == OrderSample.STATUS_REJECTED:
		raise SampleStateError(
			sample_id=sample.id,
			status=sample.status,
			message='Results cannot be entered for a rejected sample.',
		)

	now = timezone.now()
	tests = {test.test_code: test for test in sample.tests.all()}
	definitions = {
		item.test_code: item
		for item in TestCatalogItem.objects.filter(test_code__in=[r['test_code'] for r in results])
	}

	verified, unknown, reflex_codes = [], [], []
	with transaction.atomic():
		for entry in results:
			test = tests.get(entry['test_code'])
			if test is None:
				unknown.append(entry['test_code'])
				continue
			value = str(entry['value'])
			test.result_value = value
			test.notes = entry.get('notes', '')
			test.is_abnormal, test.flags = interpret_result(value, test.reference_range)
			test.status = OrderTest.STATUS_VERIFIED
			test.verified_by = user
			test.verified_at = now
			test.save()
			verified.append(test.test_code)
			reflex_codes.extend(_reflex_codes(definitions.get(test.test_code), value))

		reflexed = _add_reflex_tests(sample, reflex_codes)

		all_verified = not sample.tests.exclude(status=OrderTest.STATUS_VERIFIED).exists()
		sample.status = OrderSample.STATUS_VERIFIED if all_verified else OrderSample.STATUS_TESTING
		sample.save(update_fields=['status'])
		order_status = recompute_order_status(sample.order)

	logger.info('Verified %s on %s (sample now %s)', verified, sample.accession_number, sample.status)
	return {
		'verified_tests': verified,
		'unknown_tests': unknown,
		'reflex_tests': [t.test_code for t in reflexed],
		'sample_status': sample.status,
		'order_status': order_status,
	}


def worklist_queryset(limit: int = 100):
	"""Samples on the bench: STAT first, then the oldest received first."""
	return (
		OrderSample.objects.filter(status__in=OrderSample.WORKLIST_STATUSES)
		.exclude(order__order_status__in=[Order.STATUS_COMPLETE, Order.STATUS_CANCELLED])
		.select_related('order', 'order__patient')
		.prefetch_related('tests')
		.annotate(
			priority_rank=Case(
				When(order__priority=Order.PRIORITY_STAT, then=Value(0)),
				default=Value(1),
				output_field=IntegerField(),
			)
		)
		.order_by('priority_rank', 'received_timestamp', 'id')[:limit]
	)


def worklist_rows(limit: int = 100) -> list[dict[str, Any]]:
	rows = []
	for sample in worklist_queryset(limit):
		order = sample.order
		rows.append({
			'order_id': order.order_id,
			'sample_id': sample.id,
			'priority': order.priority,
			'patient_name': order.patient.full_name,
			'mrn': order.patient.mrn,
			'accession_number': sample.accession_number,
			'sample_type': sample.sample_type,
			'status': sample.status,
			'tests': ', '.join(test.name for test in sample.tests.all()),
			'received_at': sample.received_timestamp,
		})
	return rows
