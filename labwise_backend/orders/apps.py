from django.apps import AppConfig


class OrdersConfig(AppConfig):
	default_auto_field = 'django.db.models.BigAutoField'
	name = 'labwise_backend.orders'
	verbose_name = 'Orders & Samples'
