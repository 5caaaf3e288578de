import logging

from celery import shared_task

from .services import notify_low_stock

logger = logging.getLogger(__name__)


@shared_task
def check_low_stock():
    """Daily low-stock sweep (scheduled by celery beat)."""
    outcome = notify_low_stock()
    return {
        'low_stock_items': [item.pk for item in outcome['items']],
        'notifications_sent': outcome['notifications_sent'],
    }
