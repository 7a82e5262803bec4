from django.contrib import admin
from .models import Customer, Supplier


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'city', 'status', 'current_balance', 'credit_limit']
    list_filter = ['status', 'country']
    search_fields = ['name', 'email', 'phone']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'city', 'status', 'current_balance']
    list_filter = ['status', 'country']
    search_fields = ['name', 'email', 'phone']
    readonly_fields = ['created_at', 'updated_at']
