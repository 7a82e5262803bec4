from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal
from orderdesk.core.models import LineItem
from orderdesk.parties.models import Customer


class SalesOrder(models.Model):
    """Customer orders; stock is deducted while ``stock_applied`` is set"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    order_number = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, null=True, blank=True, related_name='sales_orders')
    customer_name = models.CharField(max_length=255)
    customer_email = models.CharField(max_length=255, blank=True)
    customer_phone = models.CharField(max_length=50, blank=True)
    customer_address = models.TextField(blank=True)
    order_date = models.DateField(default=timezone.localdate)
    delivery_date = models.DateField(null=True, blank=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True)
    stock_applied = models.BooleanField(default=False)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    class Meta:
        db_table = 'sales_orders'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='sales_order_status_3a61c2_idx'),
            models.Index(fields=['order_date'], name='sales_order_order_d_8f04b9_idx'),
        ]


class SalesOrderItem(LineItem):
    order = models.ForeignKey(SalesOrder, on_delete=models.CASCADE, related_name='items')

    class Meta:
        db_table = 'sales_order_items'
        ordering = ['id']
