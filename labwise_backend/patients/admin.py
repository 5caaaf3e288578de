from django.contrib import admin

from .models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('mrn', 'last_name', 'first_name', 'date_of_birth', 'phone')
    search_fields = ('mrn', 'last_name', 'first_name', 'phone')
    readonly_fields = ('mrn', 'created_at', 'updated_at')
