from django.contrib import admin

from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
	list_display = ('id', 'patient', 'appointment_type', 'scheduled_time', 'end_time', 'status', 'order')
	list_filter = ('appointment_type', 'status')
	search_fields = ('patient__mrn', 'patient__last_name', 'notes')
	readonly_fields = ('end_time',)
