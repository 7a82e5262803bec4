"""Product stock counter updates"""
import logging

from django.db import DEFAULT_DB_ALIAS
from django.db.models import F

from orderdesk.catalog.models import Product
from orderdesk.core.exceptions import InvalidReferenceError

logger = logging.getLogger(__name__)


def adjust_product_stock(product_id, delta: int, using=DEFAULT_DB_ALIAS):
    """
    Add ``delta`` to a product's stock in a single UPDATE statement.

    Stock is not clamped; it may go negative.
    """
    if not delta:
        return
    updated = Product.objects.using(using).filter(pk=product_id).update(stock=F('stock') + delta)
    if not updated:
        raise InvalidReferenceError(f"Product with ID {product_id} not found", product_id=product_id)
    logger.info(f"Adjusted stock of product {product_id} by {delta:+d}")
