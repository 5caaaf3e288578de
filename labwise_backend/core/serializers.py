"""Serializers for the core app.

Contains serializers for User, Role, and AuditLog models.
Follows the Read/Write serializer pattern.
"""

from rest_framework import serializers

from labwise_backend.core.models import AuditLog, Role, User


# -----------------------------------------------------------------------------
# Role Serializers
# -----------------------------------------------------------------------------


class RoleSerializer(serializers.ModelSerializer):
    """Read-only serializer for Role model."""

    class Meta:
        model = Role
        fields = ['id', 'name', 'label']
        read_only_fields = fields


# -----------------------------------------------------------------------------
# Nested JSON payloads
# -----------------------------------------------------------------------------


class TrainingRecordSerializer(serializers.Serializer):
    document_name = serializers.CharField(max_length=200)
    completion_date = serializers.DateField()
    expiry_date = serializers.DateField(required=False, allow_null=True)
    uploaded_file_url = serializers.URLField(required=False, allow_blank=True)


class PhysicianInfoSerializer(serializers.Serializer):
    npi_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    clinic_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    contact_phone = serializers.CharField(max_length=40, required=False, allow_blank=True)


def _json_ready(records):
    """Dates inside validated nested data must be stored as ISO strings."""
    if records is None:
        return None
    if isinstance(records, list):
        return [_json_ready(item) for item in records]
    return {
        key: value.isoformat() if hasattr(value, 'isoformat') else value
        for key, value in records.items()
    }


# -----------------------------------------------------------------------------
# User Serializers
# -----------------------------------------------------------------------------


class UserSerializer(serializers.ModelSerializer):
    """Read-only serializer for User model with nested role."""

    role = RoleSerializer(read_only=True)
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'first_name',
            'last_name',
            'is_active',
            'avatar',
            'role',
            'training_records',
            'physician_info',
            'date_joined',
            'last_login',
        ]
        read_only_fields = fields


class UserMeSerializer(serializers.ModelSerializer):
    role = RoleSerializer(read_only=True)
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'first_name', 'last_name', 'avatar', 'role']
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer):
    """Create/update serializer. Passwords are only accepted on create."""

    role = serializers.SlugRelatedField(slug_field='name', queryset=Role.objects.all())
    password = serializers.CharField(write_only=True, required=False, min_length=8)
    training_records = TrainingRecordSerializer(many=True, required=False)
    physician_info = PhysicianInfoSerializer(required=False, allow_null=True)

    class Meta:
        model = User
        fields = [
            'email',
            'first_name',
            'last_name',
            'password',
            'avatar',
            'role',
            'is_active',
            'training_records',
            'physician_info',
        ]

    def validate_email(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'This field is required.'})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        validated_data['training_records'] = _json_ready(validated_data.get('training_records', []))
        validated_data['physician_info'] = _json_ready(validated_data.get('physician_info'))
        return User.objects.create_user(
            username=validated_data['email'],
            password=password,
            **validated_data,
        )

    def update(self, instance, validated_data):
        validated_data.pop('password', None)
        if 'training_records' in validated_data:
            validated_data['training_records'] = _json_ready(validated_data['training_records'])
        if 'physician_info' in validated_data:
            validated_data['physician_info'] = _json_ready(validated_data['physician_info'])
        if 'email' in validated_data:
            instance.username = validated_data['email']
        return super().update(instance, validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


# -----------------------------------------------------------------------------
# AuditLog Serializers
# -----------------------------------------------------------------------------


class AuditLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for AuditLog model."""

    user_name = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'timestamp',
            'user',
            'user_name',
            'role_name',
            'action',
            'entity_type',
            'entity_id',
            'patient_id',
            'details',
            'ip_address',
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        if obj.user is None:
            return 'System'
        return obj.user.display_name
