from django.contrib import admin

from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('item_name', 'lot_number', 'quantity_on_hand', 'min_stock_level', 'expiration_date')
    search_fields = ('item_name', 'lot_number')
