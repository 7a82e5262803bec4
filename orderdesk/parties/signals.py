"""
Cache invalidation signals
Drop cached party lists whenever a customer or supplier changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from .cache import CUSTOMER_LIST, SUPPLIER_LIST, invalidate_list_cache
from .models import Customer, Supplier


@receiver([post_save, post_delete], sender=Customer)
def invalidate_customer_cache(sender, instance, **kwargs):
    invalidate_list_cache(CUSTOMER_LIST)


@receiver([post_save, post_delete], sender=Supplier)
def invalidate_supplier_cache(sender, instance, **kwargs):
    invalidate_list_cache(SUPPLIER_LIST)
