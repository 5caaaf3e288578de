"""Low-stock detection and notification."""

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db.models import F

from .models import InventoryItem

logger = logging.getLogger(__name__)


def low_stock_items():
    return InventoryItem.objects.filter(quantity_on_hand__lte=F('min_stock_level')).order_by('item_name', 'id')


def notify_low_stock() -> dict:
    """E-mail the lab manager once per item at or below its minimum level."""
    items = list(low_stock_items())
    sent = 0
    for item in items:
        subject = f"Low stock: {item.item_name} (lot {item.lot_number})"
        body = (
            f"{item.item_name}, lot {item.lot_number}, has {item.quantity_on_hand} units on hand "
            f"(minimum {item.min_stock_level}). Please reorder."
        )
        try:
            sent += send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [settings.LAB_MANAGER_EMAIL])
        except Exception:
            logger.exception('Low-stock notification failed for inventory item %s', item.pk)

    logger.info('Low-stock check: %s item(s) low, %s notification(s) sent', len(items), sent)
    return {'items': items, 'notifications_sent': sent}
