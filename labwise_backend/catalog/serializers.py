from rest_framework import serializers

from labwise_backend.catalog.models import TestCatalogItem


class SpecimenRequirementsSerializer(serializers.Serializer):
    tube_type = serializers.CharField(max_length=64)
    min_volume = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    units = serializers.CharField(max_length=16, required=False, default='mL')
    special_handling = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class TurnaroundTimeSerializer(serializers.Serializer):
    value = serializers.IntegerField(min_value=0)
    units = serializers.ChoiceField(choices=['hours', 'days'])


class ReferenceRangeSerializer(serializers.Serializer):
    age_min = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    age_max = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    gender = serializers.ChoiceField(choices=['Male', 'Female', 'Any'], default='Any')
    range_low = serializers.FloatField()
    range_high = serializers.FloatField()
    units = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['range_low'] > attrs['range_high']:
            raise serializers.ValidationError('range_low must not exceed range_high.')
        return attrs


class ReflexConditionSerializer(serializers.Serializer):
    test_code = serializers.CharField(max_length=32)
    operator = serializers.ChoiceField(choices=['gt', 'lt', 'eq'])
    value = serializers.FloatField()

    def validate_test_code(self, value):
        return value.strip().upper()


class ReflexActionSerializer(serializers.Serializer):
    add_test_code = serializers.CharField(max_length=32)

    def validate_add_test_code(self, value):
        return value.strip().upper()


class ReflexRuleSerializer(serializers.Serializer):
    condition = ReflexConditionSerializer()
    action = ReflexActionSerializer()


class TestCatalogItemReadSerializer(serializers.ModelSerializer):
    specimen_requirements = serializers.ReadOnlyField()
    turnaround_time = serializers.SerializerMethodField()

    class Meta:
        model = TestCatalogItem
        fields = [
            'id',
            'test_code',
            'name',
            'description',
            'specimen_requirements',
            'turnaround_time',
            'price',
            'is_panel',
            'panel_components',
            'reference_ranges',
            'reflex_rules',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_turnaround_time(self, obj):
        return {'value': obj.turnaround_value, 'units': obj.turnaround_units}


class TestCatalogItemWriteSerializer(serializers.ModelSerializer):
    """Accepts the nested client shape and stores it in flat columns."""

    specimen_requirements = SpecimenRequirementsSerializer(write_only=True)
    turnaround_time = TurnaroundTimeSerializer(write_only=True, required=False)
    panel_components = serializers.ListField(child=serializers.CharField(max_length=32), required=False)
    reference_ranges = ReferenceRangeSerializer(many=True, required=False)
    reflex_rules = ReflexRuleSerializer(many=True, required=False)

    class Meta:
        model = TestCatalogItem
        fields = [
            'test_code',
            'name',
            'description',
            'specimen_requirements',
            'turnaround_time',
            'price',
            'is_panel',
            'panel_components',
            'reference_ranges',
            'reflex_rules',
            'is_active',
        ]
        # duplicate codes are answered with 409 by the view
        extra_kwargs = {'test_code': {'validators': []}}

    def validate_test_code(self, value):
        return value.strip().upper()

    def validate_panel_components(self, value):
        return [code.strip().upper() for code in value]

    def validate(self, attrs):
        if attrs.get('is_panel') and not attrs.get('panel_components'):
            raise serializers.ValidationError({'panel_components': 'A panel needs at least one component.'})
        return attrs

    def _flatten(self, validated_data):
        specimen = validated_data.pop('specimen_requirements', None)
        if specimen is not None:
            validated_data['tube_type'] = specimen['tube_type']
            validated_data['min_volume'] = specimen.get('min_volume')
            validated_data['volume_units'] = specimen.get('units', 'mL')
            validated_data['special_handling'] = specimen.get('special_handling', '')
        turnaround = validated_data.pop('turnaround_time', None)
        if turnaround is not None:
            validated_data['turnaround_value'] = turnaround['value']
            validated_data['turnaround_units'] = turnaround['units']
        return validated_data

    def create(self, validated_data):
        return TestCatalogItem.objects.create(**self._flatten(validated_data))

    def update(self, instance, validated_data):
        for attr, value in self._flatten(validated_data).items():
            setattr(instance, attr, value)
        instance.save()
        return instance
