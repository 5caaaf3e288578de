from django.db import models


class InventoryItem(models.Model):
    """Reagent or consumable lot held in stock."""

    item_name = models.CharField(max_length=200)
    lot_number = models.CharField(max_length=64)
    quantity_on_hand = models.PositiveIntegerField(default=0)
    min_stock_level = models.PositiveIntegerField(default=0)
    expiration_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['item_name', 'id']
        verbose_name = 'Inventory item'
        verbose_name_plural = 'Inventory'

    def __str__(self) -> str:
        return f"{self.item_name} (lot {self.lot_number})"

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_on_hand <= self.min_stock_level
