from rest_framework import serializers

from labwise_backend.orders.models import Order, OrderSample, OrderTest
from labwise_backend.patients.models import Patient


# -----------------------------------------------------------------------------
# Read serializers
# -----------------------------------------------------------------------------


class PatientBriefSerializer(serializers.ModelSerializer):
	class Meta:
		model = Patient
		fields = ['id', 'mrn', 'first_name', 'last_name', 'date_of_birth', 'gender', 'phone']
		read_only_fields = fields


class OrderTestSerializer(serializers.ModelSerializer):
	class Meta:
		model = OrderTest
		fields = [
			'id',
			'test_code',
			'name',
			'status',
			'result_value',
			'result_units',
			'reference_range',
			'is_abnormal',
			'is_critical',
			'flags',
			'notes',
			'is_reflex',
			'verified_by',
			'verified_at',
		]
		read_only_fields = fields


class OrderSampleSerializer(serializers.ModelSerializer):
	tests = OrderTestSerializer(many=True, read_only=True)
	rejection_info = serializers.SerializerMethodField()

	class Meta:
		model = OrderSample
		fields = [
			'id',
			'sample_type',
			'status',
			'accession_number',
			'collection_timestamp',
			'received_timestamp',
			'rejection_info',
			'tests',
		]
		read_only_fields = fields

	def get_rejection_info(self, obj):
		if obj.status != OrderSample.STATUS_REJECTED:
			return None
		return {
			'reason': obj.rejection_reason,
			'rejected_by': obj.rejected_by_id,
			'timestamp': obj.rejected_at,
		}


class OrderSerializer(serializers.ModelSerializer):
	"""Order with patient summary, samples/tests and its linked appointment."""

	patient_info = PatientBriefSerializer(source='patient', read_only=True)
	physician_name = serializers.CharField(source='physician.display_name', read_only=True)
	samples = OrderSampleSerializer(many=True, read_only=True)
	appointment = serializers.SerializerMethodField()

	class Meta:
		model = Order
		fields = [
			'id',
			'order_id',
			'patient',
			'patient_info',
			'physician',
			'physician_name',
			'icd10_code',
			'order_status',
			'priority',
			'samples',
			'appointment',
			'created_by',
			'created_at',
			'updated_at',
		]
		read_only_fields = fields

	def get_appointment(self, obj):
		# same pick as update_order, which moves the first booked appointment
		appointment = min(obj.appointments.all(), key=lambda a: a.id, default=None)
		if appointment is None:
			return None
		return {
			'id': appointment.id,
			'scheduled_time': appointment.scheduled_time,
			'duration_minutes': appointment.duration_minutes,
			'status': appointment.status,
			'notes': appointment.notes,
		}


# -----------------------------------------------------------------------------
# Write serializers
# -----------------------------------------------------------------------------


class TestCodeListField(serializers.ListField):
	child = serializers.CharField(max_length=32)

	def to_internal_value(self, data):
		codes = super().to_internal_value(data)
		seen = []
		for code in codes:
			code = code.strip().upper()
			if code and code not in seen:
				seen.append(code)
		return seen


class SampleRequestSerializer(serializers.Serializer):
	# sample_type is informational; tubes follow the catalog
	sample_type = serializers.CharField(max_length=64, required=False, allow_blank=True)
	test_codes = TestCodeListField(allow_empty=False)


class AppointmentDetailsSerializer(serializers.Serializer):
	scheduled_time = serializers.DateTimeField()
	duration_minutes = serializers.IntegerField(min_value=1, required=False)
	notes = serializers.CharField(required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
	"""Order entry. Tests come either grouped in ``samples`` or as flat ``test_codes``."""

	patient_id = serializers.IntegerField()
	physician_id = serializers.IntegerField()
	icd10_code = serializers.CharField(max_length=16)
	priority = serializers.ChoiceField(choices=[c for c, _ in Order.PRIORITY_CHOICES], default=Order.PRIORITY_ROUTINE)
	samples = SampleRequestSerializer(many=True, required=False)
	test_codes = TestCodeListField(required=False)
	appointment_details = AppointmentDetailsSerializer(required=False, allow_null=True)

	def validate(self, attrs):
		codes = list(attrs.get('test_codes') or [])
		for sample in attrs.get('samples') or []:
			codes.extend(c for c in sample['test_codes'] if c not in codes)
		if not codes:
			raise serializers.ValidationError({'test_codes': 'At least one test must be ordered.'})
		attrs['all_test_codes'] = codes
		return attrs


class OrderUpdateSerializer(serializers.Serializer):
	patient_id = serializers.IntegerField(required=False)
	physician_id = serializers.IntegerField()
	icd10_code = serializers.CharField(max_length=16)
	priority = serializers.ChoiceField(choices=[c for c, _ in Order.PRIORITY_CHOICES], required=False)
	test_codes = TestCodeListField(allow_empty=False)
	appointment_details = AppointmentDetailsSerializer()


class SampleActionSerializer(serializers.Serializer):
	order_id = serializers.CharField(max_length=32)
	sample_id = serializers.IntegerField()


class SampleRejectSerializer(SampleActionSerializer):
	reason = serializers.CharField(max_length=500)


class ResultEntrySerializer(serializers.Serializer):
	test_code = serializers.CharField(max_length=32)
	value = serializers.CharField(max_length=64, allow_blank=True)
	notes = serializers.CharField(required=False, allow_blank=True, default='')


class VerifyResultsSerializer(serializers.Serializer):
	accession_number = serializers.CharField(max_length=32)
	results = ResultEntrySerializer(many=True, allow_empty=False)
