from django.contrib import admin

from .models import Instrument, MaintenanceLog, QCLog


class MaintenanceLogInline(admin.TabularInline):
    model = MaintenanceLog
    extra = 0


@admin.register(Instrument)
class InstrumentAdmin(admin.ModelAdmin):
    list_display = ('instrument_id', 'name', 'model', 'status', 'last_calibration_date')
    list_filter = ('status',)
    search_fields = ('instrument_id', 'name')
    inlines = [MaintenanceLogInline]


@admin.register(QCLog)
class QCLogAdmin(admin.ModelAdmin):
    list_display = ('run_timestamp', 'instrument', 'test_code', 'result_value', 'is_pass')
    list_filter = ('is_pass', 'test_code')
