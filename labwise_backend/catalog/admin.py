from django.contrib import admin

from .models import TestCatalogItem


@admin.register(TestCatalogItem)
class TestCatalogItemAdmin(admin.ModelAdmin):
    list_display = ('test_code', 'name', 'tube_type', 'price', 'is_panel', 'is_active')
    list_filter = ('tube_type', 'is_panel', 'is_active')
    search_fields = ('test_code', 'name')
