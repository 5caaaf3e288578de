"""
Core App Configuration
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Users, roles, audit trail and sequence counters."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'labwise_backend.core'
    verbose_name = 'Core (Users & Roles)'
