from django.db import models
from decimal import Decimal

DEFAULT_LOW_STOCK_THRESHOLD = 10


class Category(models.Model):
    """Product categories, optionally nested"""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    image_url = models.URLField(max_length=500, blank=True)
    image_public_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Products; ``stock`` is the on-hand counter and may go negative"""
    name = models.CharField(max_length=255)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    sku = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    stock = models.IntegerField(default=0)
    min_stock = models.IntegerField(default=0)
    unit = models.CharField(max_length=20, default='pcs')
    barcode = models.CharField(max_length=100, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    image_public_id = models.CharField(max_length=255, blank=True)
    gallery = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def low_stock_threshold(self):
        return self.min_stock or DEFAULT_LOW_STOCK_THRESHOLD

    @property
    def is_low_stock(self):
        return self.stock <= self.low_stock_threshold

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sku'], name='products_sku_5d0a7b_idx'),
            models.Index(fields=['barcode'], name='products_barcode_e2c9f1_idx'),
        ]
