from django.contrib.auth.models import AbstractUser
from django.db import models
from django.conf import settings


class Role(models.Model):
    """User roles for RBAC (Role-Based Access Control).

    Standard roles: receptionist, technician, manager, physician, patient,
    phlebotomist
    """

    RECEPTIONIST = 'receptionist'
    TECHNICIAN = 'technician'
    MANAGER = 'manager'
    PHYSICIAN = 'physician'
    PATIENT = 'patient'
    PHLEBOTOMIST = 'phlebotomist'

    name = models.CharField(max_length=64, unique=True, db_index=True)
    label = models.CharField(max_length=128)

    class Meta:
        db_table = 'core_role'
        ordering = ['name']
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self) -> str:
        return self.label


class User(AbstractUser):
    """Lab staff, referring physicians and portal patients.

    Extends Django's AbstractUser with:
    - role: ForeignKey to Role for RBAC
    - email: unique, used as the login identifier
    - training_records: competency documents of lab staff
    - physician_info: NPI and clinic data for referring physicians
    """

    email = models.EmailField('email address', unique=True)
    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name='users',
    )
    avatar = models.URLField(blank=True, default='')
    training_records = models.JSONField(default=list, blank=True)
    physician_info = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'core_user'
        ordering = ['-date_joined', '-id']
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    @property
    def role_name(self):
        return getattr(self.role, 'name', None)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.email or self.username


class AuditLog(models.Model):
    """Audit trail of clinically relevant actions.

    ``entity_type``/``entity_id`` point at the affected record (order id,
    instrument id, user id); ``patient_id`` is set when the action concerns a
    patient.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    role_name = models.CharField(max_length=50, blank=True, db_index=True)
    action = models.CharField(max_length=50, db_index=True)
    entity_type = models.CharField(max_length=50, blank=True, default='')
    entity_id = models.CharField(max_length=64, blank=True, default='', db_index=True)
    patient_id = models.IntegerField(null=True, blank=True, db_index=True)
    details = models.JSONField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'core_auditlog'
        ordering = ['-timestamp', '-id']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'

    def __str__(self) -> str:
        return f"{self.timestamp} {self.action} ({self.entity_type} {self.entity_id})"


class Counter(models.Model):
    """Named monotonically increasing sequence (MRNs, order ids, accessions)."""

    name = models.CharField(max_length=64, primary_key=True)
    value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'core_counter'

    def __str__(self) -> str:
        return f"{self.name}={self.value}"
