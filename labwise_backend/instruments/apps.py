from django.apps import AppConfig


class InstrumentsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'labwise_backend.instruments'
    verbose_name = 'Instruments & QC'
