from rest_framework import serializers

from .models import Instrument, MaintenanceLog, QCLog


class MaintenanceLogSerializer(serializers.ModelSerializer):
    performed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = MaintenanceLog
        fields = ['id', 'log_type', 'description', 'performed_by', 'performed_by_name', 'timestamp']
        read_only_fields = ['id', 'performed_by', 'performed_by_name', 'timestamp']

    def get_performed_by_name(self, obj):
        return obj.performed_by.display_name if obj.performed_by else None


class InstrumentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Instrument
        fields = [
            'id',
            'instrument_id',
            'name',
            'model',
            'status',
            'last_calibration_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class InstrumentDetailSerializer(InstrumentSerializer):
    maintenance_logs = MaintenanceLogSerializer(many=True, read_only=True)

    class Meta(InstrumentSerializer.Meta):
        fields = InstrumentSerializer.Meta.fields + ['maintenance_logs']


class QCLogSerializer(serializers.ModelSerializer):
    instrument = serializers.PrimaryKeyRelatedField(queryset=Instrument.objects.all())
    instrument_name = serializers.CharField(source='instrument.name', read_only=True)
    performed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = QCLog
        fields = [
            'id',
            'instrument',
            'instrument_name',
            'test_code',
            'qc_material_lot',
            'result_value',
            'mean',
            'sd',
            'is_pass',
            'run_timestamp',
            'performed_by',
            'performed_by_name',
            'corrective_action',
            'corrective_action_by',
            'corrective_action_at',
        ]
        read_only_fields = [
            'id',
            'is_pass',
            'performed_by',
            'corrective_action',
            'corrective_action_by',
            'corrective_action_at',
        ]
        extra_kwargs = {'run_timestamp': {'required': False}}

    def get_performed_by_name(self, obj):
        return obj.performed_by.display_name if obj.performed_by else None

    def validate_test_code(self, value):
        return value.strip().upper()

    def validate_sd(self, value):
        if value <= 0:
            raise serializers.ValidationError('Standard deviation must be positive.')
        return value

    def create(self, validated_data):
        validated_data['is_pass'] = QCLog.westgard_1_2s(
            validated_data['result_value'],
            validated_data['mean'],
            validated_data['sd'],
        )
        return super().create(validated_data)


class CorrectiveActionSerializer(serializers.Serializer):
    corrective_action = serializers.CharField(
        trim_whitespace=True,
        error_messages={
            'required': 'Corrective action is required.',
            'blank': 'Corrective action is required.',
        },
    )
