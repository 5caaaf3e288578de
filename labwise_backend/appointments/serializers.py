from rest_framework import serializers

from labwise_backend.orders.models import Order
from labwise_backend.patients.models import Patient

from .models import Appointment


class AppointmentSerializer(serializers.ModelSerializer):
	class Meta:
		model = Appointment
		fields = [
			'id',
			'patient',
			'order',
			'appointment_type',
			'scheduled_time',
			'duration_minutes',
			'end_time',
			'status',
			'notes',
			'created_at',
			'updated_at',
		]
		read_only_fields = fields


class AppointmentCreateUpdateSerializer(serializers.ModelSerializer):
	patient_id = serializers.PrimaryKeyRelatedField(
		source='patient',
		queryset=Patient.objects.all(),
	)
	order_id = serializers.PrimaryKeyRelatedField(
		source='order',
		queryset=Order.objects.all(),
		required=False,
		allow_null=True,
	)
	duration_minutes = serializers.IntegerField(
		min_value=1,
		max_value=24 * 60,
		required=False,
		default=Appointment.DEFAULT_DURATION_MINUTES,
	)

	class Meta:
		model = Appointment
		fields = [
			'patient_id',
			'order_id',
			'appointment_type',
			'scheduled_time',
			'duration_minutes',
			'status',
			'notes',
		]
		extra_kwargs = {
			'appointment_type': {'required': True},
		}

	def validate(self, attrs):
		order = attrs['order'] if 'order' in attrs else getattr(self.instance, 'order', None)
		patient = attrs.get('patient') or getattr(self.instance, 'patient', None)
		if order is not None and patient is not None and order.patient_id != patient.id:
			raise serializers.ValidationError({'order_id': 'Order belongs to a different patient.'})
		return attrs
