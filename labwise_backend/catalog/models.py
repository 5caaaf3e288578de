from django.db import models


class TestCatalogItem(models.Model):
    """Orderable laboratory test (or panel) definition.

    Orders snapshot code, name, units and reference range at entry time,
    so edits here never rewrite historical results.
    """

    TURNAROUND_HOURS = 'hours'
    TURNAROUND_DAYS = 'days'

    TURNAROUND_CHOICES = (
        (TURNAROUND_HOURS, TURNAROUND_HOURS),
        (TURNAROUND_DAYS, TURNAROUND_DAYS),
    )

    test_code = models.CharField(max_length=32, unique=True, db_index=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')

    # specimen requirements
    tube_type = models.CharField(max_length=64)
    min_volume = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    volume_units = models.CharField(max_length=16, blank=True, default='mL')
    special_handling = models.CharField(max_length=255, blank=True, default='')

    turnaround_value = models.PositiveIntegerField(default=24)
    turnaround_units = models.CharField(max_length=8, choices=TURNAROUND_CHOICES, default=TURNAROUND_HOURS)

    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    is_panel = models.BooleanField(default=False)
    panel_components = models.JSONField(default=list, blank=True)
    reference_ranges = models.JSONField(default=list, blank=True)
    reflex_rules = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name', 'id']
        verbose_name = 'Test catalog item'
        verbose_name_plural = 'Test catalog'

    def __str__(self) -> str:
        return f"{self.test_code} - {self.name}"

    @property
    def specimen_requirements(self) -> dict:
        return {
            'tube_type': self.tube_type,
            'min_volume': float(self.min_volume) if self.min_volume is not None else None,
            'units': self.volume_units,
            'special_handling': self.special_handling,
        }

    def reference_range_for(self, age=None, gender=None) -> dict | None:
        """First range matching age and gender (``Any`` matches all), else the first range."""
        ranges = self.reference_ranges or []
        for entry in ranges:
            if gender and entry.get('gender', 'Any') not in ('Any', gender):
                continue
            if age is not None:
                age_min = entry.get('age_min')
                age_max = entry.get('age_max')
                if age_min is not None and age < age_min:
                    continue
                if age_max is not None and age > age_max:
                    continue
            return entry
        return ranges[0] if ranges else None
