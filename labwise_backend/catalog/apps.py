from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'labwise_backend.catalog'
    verbose_name = 'Test catalog'
