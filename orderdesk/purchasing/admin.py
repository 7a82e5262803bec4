from django.contrib import admin
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'quantity', 'price', 'total']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'supplier_name', 'order_date', 'expected_date', 'status', 'total', 'stock_applied']
    list_filter = ['status', 'order_date']
    search_fields = ['order_number', 'supplier_name']
    readonly_fields = ['stock_applied', 'created_at', 'updated_at']
    inlines = [PurchaseOrderItemInline]
