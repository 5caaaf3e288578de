"""Lab orders and the physical samples and tests they consist of.

An ``Order`` groups its tests into one ``OrderSample`` per specimen tube
type. ``OrderTest`` rows are snapshots of the catalog taken at order entry
(code, name, units, reference range) and carry the results once entered.
"""

from django.conf import settings
from django.db import models


class Order(models.Model):
	STATUS_PENDING = 'Pending'
	STATUS_PARTIALLY_COLLECTED = 'Partially Collected'
	STATUS_IN_PROGRESS = 'In Progress'
	STATUS_PARTIALLY_COMPLETE = 'Partially Complete'
	STATUS_COMPLETE = 'Complete'
	STATUS_CANCELLED = 'Cancelled'

	STATUS_CHOICES = (
		(STATUS_PENDING, STATUS_PENDING),
		(STATUS_PARTIALLY_COLLECTED, STATUS_PARTIALLY_COLLECTED),
		(STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
		(STATUS_PARTIALLY_COMPLETE, STATUS_PARTIALLY_COMPLETE),
		(STATUS_COMPLETE, STATUS_COMPLETE),
		(STATUS_CANCELLED, STATUS_CANCELLED),
	)

	PRIORITY_ROUTINE = 'Routine'
	PRIORITY_STAT = 'STAT'

	PRIORITY_CHOICES = (
		(PRIORITY_ROUTINE, PRIORITY_ROUTINE),
		(PRIORITY_STAT, PRIORITY_STAT),
	)

	order_id = models.CharField(max_length=32, unique=True, db_index=True)
	patient = models.ForeignKey(
		'patients.Patient',
		on_delete=models.PROTECT,
		related_name='orders',
	)
	physician = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		on_delete=models.PROTECT,
		related_name='ordered_orders',
	)
	icd10_code = models.CharField(max_length=16)
	order_status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING)
	priority = models.CharField(max_length=16, choices=PRIORITY_CHOICES, default=PRIORITY_ROUTINE)
	created_by = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='created_orders',
	)
	created_at = models.DateTimeField(auto_now_add=True, db_index=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['-created_at', '-id']

	def __str__(self) -> str:
		return self.order_id


class OrderSample(models.Model):
	STATUS_AWAITING_COLLECTION = 'AwaitingCollection'
	STATUS_COLLECTED = 'Collected'
	STATUS_IN_LAB = 'InLab'
	STATUS_TESTING = 'Testing'
	STATUS_AWAITING_VERIFICATION = 'AwaitingVerification'
	STATUS_VERIFIED = 'Verified'
	STATUS_ARCHIVED = 'Archived'
	STATUS_REJECTED = 'Rejected'

	STATUS_CHOICES = (
		(STATUS_AWAITING_COLLECTION, STATUS_AWAITING_COLLECTION),
		(STATUS_COLLECTED, STATUS_COLLECTED),
		(STATUS_IN_LAB, STATUS_IN_LAB),
		(STATUS_TESTING, STATUS_TESTING),
		(STATUS_AWAITING_VERIFICATION, STATUS_AWAITING_VERIFICATION),
		(STATUS_VERIFIED, STATUS_VERIFIED),
		(STATUS_ARCHIVED, STATUS_ARCHIVED),
		(STATUS_REJECTED, STATUS_REJECTED),
	)

	# samples on the bench, shown on the technician worklist
	WORKLIST_STATUSES = (STATUS_IN_LAB, STATUS_TESTING, STATUS_AWAITING_VERIFICATION)

	order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='samples')
	sample_type = models.CharField(max_length=64)
	status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_AWAITING_COLLECTION)
	collection_timestamp = models.DateTimeField(null=True, blank=True)
	received_timestamp = models.DateTimeField(null=True, blank=True, db_index=True)
	accession_number = models.CharField(max_length=32, unique=True, null=True, blank=True)
	rejection_reason = models.TextField(blank=True, default='')
	rejected_by = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='rejected_samples',
	)
	rejected_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		ordering = ['id']

	def __str__(self) -> str:
		return f"{self.order.order_id} {self.sample_type} ({self.status})"


class OrderTest(models.Model):
	STATUS_PENDING = 'Pending'
	STATUS_IN_PROGRESS = 'In Progress'
	STATUS_AWAITING_VERIFICATION = 'AwaitingVerification'
	STATUS_VERIFIED = 'Verified'
	STATUS_CANCELLED = 'Cancelled'

	STATUS_CHOICES = (
		(STATUS_PENDING, STATUS_PENDING),
		(STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
		(STATUS_AWAITING_VERIFICATION, STATUS_AWAITING_VERIFICATION),
		(STATUS_VERIFIED, STATUS_VERIFIED),
		(STATUS_CANCELLED, STATUS_CANCELLED),
	)

	sample = models.ForeignKey(OrderSample, on_delete=models.CASCADE, related_name='tests')
	test_code = models.CharField(max_length=32)
	name = models.CharField(max_length=200)
	status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING)
	result_value = models.CharField(max_length=64, blank=True, default='')
	result_units = models.CharField(max_length=32, blank=True, default='')
	reference_range = models.CharField(max_length=64, blank=True, default='N/A')
	is_abnormal = models.BooleanField(default=False)
	is_critical = models.BooleanField(default=False)
	flags = models.JSONField(default=list, blank=True)
	notes = models.TextField(blank=True, default='')
	is_reflex = models.BooleanField(default=False)
	verified_by = models.ForeignKey(
		settings.AUTH_USER_MODEL,
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='verified_tests',
	)
	verified_at = models.DateTimeField(null=True, blank=True)

	class Meta:
		ordering = ['id']

	def __str__(self) -> str:
		return f"{self.test_code} ({self.status})"
