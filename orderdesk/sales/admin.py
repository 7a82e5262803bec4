from django.contrib import admin
from .models import SalesOrder, SalesOrderItem


class SalesOrderItemInline(admin.TabularInline):
    model = SalesOrderItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'quantity', 'price', 'total']


@admin.register(SalesOrder)
class SalesOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer_name', 'order_date', 'status', 'total', 'stock_applied', 'created_at']
    list_filter = ['status', 'order_date']
    search_fields = ['order_number', 'customer_name', 'customer_email']
    readonly_fields = ['stock_applied', 'created_at', 'updated_at']
    inlines = [SalesOrderItemInline]
