from django.conf import settings
from django.db import models
from django.utils import timezone


class Instrument(models.Model):
    """Analyzer or other lab device."""

    STATUS_ONLINE = 'Online'
    STATUS_OFFLINE = 'Offline'
    STATUS_MAINTENANCE = 'Maintenance'

    STATUS_CHOICES = (
        (STATUS_ONLINE, STATUS_ONLINE),
        (STATUS_OFFLINE, STATUS_OFFLINE),
        (STATUS_MAINTENANCE, STATUS_MAINTENANCE),
    )

    instrument_id = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=200)
    model = models.CharField(max_length=200, blank=True, default='')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ONLINE)
    last_calibration_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name', 'id']

    def __str__(self) -> str:
        return f"{self.name} ({self.instrument_id})"


class MaintenanceLog(models.Model):
    TYPE_MAINTENANCE = 'Maintenance'
    TYPE_CALIBRATION = 'Calibration'
    TYPE_REPAIR = 'Repair'
    TYPE_ERROR = 'Error'

    TYPE_CHOICES = (
        (TYPE_MAINTENANCE, TYPE_MAINTENANCE),
        (TYPE_CALIBRATION, TYPE_CALIBRATION),
        (TYPE_REPAIR, TYPE_REPAIR),
        (TYPE_ERROR, TYPE_ERROR),
    )

    instrument = models.ForeignKey(Instrument, on_delete=models.CASCADE, related_name='maintenance_logs')
    log_type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    description = models.TextField()
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='maintenance_logs',
    )
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp', '-id']

    def __str__(self) -> str:
        return f"{self.instrument.instrument_id} {self.log_type} @ {self.timestamp}"


class QCLog(models.Model):
    """Quality control run, judged with the Westgard 1-2s rule."""

    instrument = models.ForeignKey(Instrument, on_delete=models.CASCADE, related_name='qc_logs')
    test_code = models.CharField(max_length=32)
    qc_material_lot = models.CharField(max_length=64)
    result_value = models.FloatField()
    mean = models.FloatField()
    sd = models.FloatField()
    is_pass = models.BooleanField(default=True)
    run_timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='qc_runs',
    )
    corrective_action = models.TextField(blank=True, default='')
    corrective_action_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='qc_corrective_actions',
    )
    corrective_action_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-run_timestamp', '-id']
        verbose_name = 'QC log'
        verbose_name_plural = 'QC logs'

    def __str__(self) -> str:
        return f"QC {self.test_code} on {self.instrument.instrument_id} ({'pass' if self.is_pass else 'fail'})"

    @staticmethod
    def westgard_1_2s(value: float, mean: float, sd: float) -> bool:
        return abs(value - mean) < 2 * sd
