from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AuditLog, Counter, Role, User


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'label')
    search_fields = ('name', 'label')


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ('email', 'first_name', 'last_name', 'role', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Lab', {'fields': ('role', 'avatar', 'training_records', 'physician_info')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'user', 'role_name', 'entity_type', 'entity_id')
    list_filter = ('action', 'role_name')
    search_fields = ('entity_id', 'action')
    readonly_fields = [f.name for f in AuditLog._meta.fields]


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ('name', 'value')
