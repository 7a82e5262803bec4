from django.contrib import admin
from .models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'quantity', 'price', 'total']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'customer_name', 'sales_order', 'invoice_date', 'due_date', 'status', 'total', 'paid_amount']
    list_filter = ['status', 'invoice_date']
    search_fields = ['invoice_number', 'customer_name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [InvoiceItemInline]
