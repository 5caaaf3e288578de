from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from .models import InventoryItem

INVENTORY = [
    ("Lavender Top Tubes", "LT-2401", 500, 100),
    ("Gold Top Tubes", "GT-2402", 80, 100),
    ("Light Blue Top Tubes", "LB-2403", 150, 50),
    ("TSH Reagent Pack", "TSH-R-77", 4, 5),
]


def seed_inventory() -> dict:
    created = 0
    expiry = timezone.localdate() + timedelta(days=180)
    with transaction.atomic():
        for name, lot, quantity, minimum in INVENTORY:
            _item, was_created = InventoryItem.objects.get_or_create(
                item_name=name,
                lot_number=lot,
                defaults={
                    "quantity_on_hand": quantity,
                    "min_stock_level": minimum,
                    "expiration_date": expiry,
                },
            )
            created += int(was_created)
    return {"inventory_items_created": created}
