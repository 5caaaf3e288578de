"""Patient appointments (consultations and sample collection visits)."""

from datetime import timedelta

from django.db import models


class Appointment(models.Model):
	"""A scheduled visit of a patient.

	``end_time`` is derived from ``scheduled_time`` and ``duration_minutes``
	on every save so overlap checks can run as a single range query.
	Sample collection visits may point at the order whose samples are drawn.
	"""
	TYPE_CONSULTATION = 'Consultation'
	TYPE_SAMPLE_COLLECTION = 'Sample Collection'

	TYPE_CHOICES = (
		(TYPE_CONSULTATION, TYPE_CONSULTATION),
		(TYPE_SAMPLE_COLLECTION, TYPE_SAMPLE_COLLECTION),
	)

	STATUS_SCHEDULED = 'Scheduled'
	STATUS_CHECKED_IN = 'CheckedIn'
	STATUS_COMPLETED = 'Completed'
	STATUS_NO_SHOW = 'NoShow'

	STATUS_CHOICES = (
		(STATUS_SCHEDULED, STATUS_SCHEDULED),
		(STATUS_CHECKED_IN, STATUS_CHECKED_IN),
		(STATUS_COMPLETED, STATUS_COMPLETED),
		(STATUS_NO_SHOW, STATUS_NO_SHOW),
	)

	DEFAULT_DURATION_MINUTES = 15

	patient = models.ForeignKey(
		'patients.Patient',
		on_delete=models.PROTECT,
		related_name='appointments',
	)
	order = models.ForeignKey(
		'orders.Order',
		null=True,
		blank=True,
		on_delete=models.SET_NULL,
		related_name='appointments',
	)
	appointment_type = models.CharField(max_length=32, choices=TYPE_CHOICES, default=TYPE_SAMPLE_COLLECTION)
	scheduled_time = models.DateTimeField(db_index=True)
	duration_minutes = models.PositiveIntegerField(default=DEFAULT_DURATION_MINUTES)
	end_time = models.DateTimeField(db_index=True, editable=False)
	status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
	notes = models.TextField(blank=True, default='')
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:
		ordering = ['scheduled_time', 'id']

	def __str__(self) -> str:
		return f"Appointment #{self.id} ({self.scheduled_time:%Y-%m-%d %H:%M})"

	def save(self, *args, **kwargs):
		self.end_time = self.scheduled_time + timedelta(minutes=self.duration_minutes)
		update_fields = kwargs.get('update_fields')
		if update_fields is not None and 'end_time' not in update_fields:
			kwargs['update_fields'] = [*update_fields, 'end_time']
		super().save(*args, **kwargs)
