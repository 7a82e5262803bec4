from django.db import models
from orderdesk.catalog.models import Product


class StockRecord(models.Model):
    """A counted batch of a product at a location; quantities add to Product.stock"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='stock_records')
    quantity = models.IntegerField()
    location = models.CharField(max_length=255, blank=True)
    warehouse_section = models.CharField(max_length=100, blank=True)
    batch_number = models.CharField(max_length=100, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product} x {self.quantity}"

    class Meta:
        db_table = 'stock_records'
        ordering = ['-created_at']
