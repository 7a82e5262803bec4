from django.db import models
from decimal import Decimal


class Party(models.Model):
    """Fields shared by customers and suppliers"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
        ('blocked', 'Blocked'),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default='USA')
    tax_id = models.CharField(max_length=50, blank=True)
    payment_terms = models.CharField(max_length=100, blank=True)
    current_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def snapshot(self):
        """Contact fields copied onto orders and invoices"""
        return {
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
        }

    class Meta:
        abstract = True


class Customer(Party):
    """Customers"""
    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']


class Supplier(Party):
    """Suppliers"""
    bank_details = models.TextField(blank=True)

    class Meta:
        db_table = 'suppliers'
        ordering = ['-created_at']
