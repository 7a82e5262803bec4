from django.contrib import admin
from .models import StockRecord


@admin.register(StockRecord)
class StockRecordAdmin(admin.ModelAdmin):
    list_display = ['product', 'quantity', 'location', 'warehouse_section', 'batch_number', 'expiry_date', 'created_at']
    list_filter = ['location', 'warehouse_section']
    search_fields = ['product__name', 'batch_number']
    readonly_fields = ['created_at', 'updated_at']
