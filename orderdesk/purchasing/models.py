from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal
from orderdesk.core.models import LineItem
from orderdesk.parties.models import Supplier


class PurchaseOrder(models.Model):
    """Supplier orders; stock is added while ``stock_applied`` is set"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('ordered', 'Ordered'),
        ('received', 'Received'),
        ('cancelled', 'Cancelled'),
    ]

    order_number = models.CharField(max_length=50, unique=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='purchase_orders')
    supplier_name = models.CharField(max_length=255)
    supplier_email = models.CharField(max_length=255, blank=True)
    supplier_phone = models.CharField(max_length=50, blank=True)
    supplier_address = models.TextField(blank=True)
    order_date = models.DateField(default=timezone.localdate)
    expected_date = models.DateField(null=True, blank=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True)
    stock_applied = models.BooleanField(default=False)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='purchase_or_status_b72e41_idx'),
            models.Index(fields=['order_date'], name='purchase_or_order_d_1c9a55_idx'),
        ]


class PurchaseOrderItem(LineItem):
    order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')

    class Meta:
        db_table = 'purchase_order_items'
        ordering = ['id']
