from django.contrib import admin

from .models import Order, OrderSample, OrderTest


class OrderSampleInline(admin.TabularInline):
	model = OrderSample
	extra = 0
	fields = ('sample_type', 'status', 'accession_number', 'collection_timestamp', 'received_timestamp')


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
	list_display = ('order_id', 'patient', 'physician', 'priority', 'order_status', 'created_at')
	list_filter = ('order_status', 'priority')
	search_fields = ('order_id', 'patient__mrn', 'patient__last_name')
	inlines = [OrderSampleInline]


@admin.register(OrderTest)
class OrderTestAdmin(admin.ModelAdmin):
	list_display = ('test_code', 'name', 'status', 'result_value', 'is_abnormal', 'verified_at')
	list_filter = ('status', 'is_abnormal')
	search_fields = ('test_code', 'sample__accession_number')
