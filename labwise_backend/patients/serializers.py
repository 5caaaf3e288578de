from rest_framework import serializers

from labwise_backend.core.counters import next_mrn
from labwise_backend.patients.models import Patient


class InsuranceSerializer(serializers.Serializer):
    provider_name = serializers.CharField(max_length=200)
    policy_number = serializers.CharField(max_length=100)
    group_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    is_primary = serializers.BooleanField(default=False)


class PatientReadSerializer(serializers.ModelSerializer):
    """Read-only serializer with all fields."""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Patient
        fields = [
            'id',
            'mrn',
            'first_name',
            'last_name',
            'full_name',
            'date_of_birth',
            'gender',
            'phone',
            'email',
            'street',
            'city',
            'state',
            'zip_code',
            'insurance_info',
            'user',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PatientWriteSerializer(serializers.ModelSerializer):
    """Write serializer for create/update. ``mrn`` is assigned, never accepted."""

    insurance_info = InsuranceSerializer(many=True, required=False)

    class Meta:
        model = Patient
        fields = [
            'first_name',
            'last_name',
            'date_of_birth',
            'gender',
            'phone',
            'email',
            'street',
            'city',
            'state',
            'zip_code',
            'insurance_info',
            'user',
        ]

    def validate_user(self, value):
        if value is not None and getattr(value.role, 'name', None) != 'patient':
            raise serializers.ValidationError('Linked portal account must have the patient role.')
        return value

    def create(self, validated_data):
        validated_data['insurance_info'] = validated_data.get('insurance_info', [])
        return Patient.objects.create(mrn=next_mrn(), **validated_data)

    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class EligibilityRequestSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    policy_number = serializers.CharField(max_length=100)
