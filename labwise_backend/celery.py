import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "labwise_backend.settings")

app = Celery("labwise_backend")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "inventory-low-stock-daily": {
        "task": "labwise_backend.inventory.tasks.check_low_stock",
        "schedule": crontab(hour=6, minute=0),
    },
}
