"""
Line-item enrichment and document totals.

Sales orders, purchase orders and invoices share the same item shape:
product, denormalised product name, quantity, unit price and line total.
"""
from dataclasses import asdict, dataclass
from decimal import Decimal, ROUND_HALF_UP

from django.db import DEFAULT_DB_ALIAS

from orderdesk.catalog.models import Product
from .exceptions import InvalidReferenceError, ValidationError
from .fields import CENT, ZERO

MONEY_FIELDS = ('subtotal', 'tax', 'discount', 'total')


@dataclass
class EnrichedItem:
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    total: Decimal

    def as_model_kwargs(self):
        return asdict(self)


@dataclass
class Totals:
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal

    def as_dict(self):
        return asdict(self)


def _money(value):
    if value is None:
        return ZERO
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _explicit_price(item):
    for key in ('price', 'unit_price'):
        if item.get(key) is not None:
            return item[key]
    return None


def enrich_items(items, price_field='price', using=DEFAULT_DB_ALIAS):
    """
    Validate and price submitted line items.

    Every referenced product is loaded before anything is returned, so a
    single unknown id fails the whole batch. An explicit ``price`` (or the
    legacy ``unit_price``) wins, zero included; otherwise the product's
    ``price_field`` (``price`` for sales, ``cost`` for purchases) is used.
    """
    if not items:
        raise ValidationError('At least one item is required')

    product_ids = [item['product'] for item in items]
    products = Product.objects.using(using).in_bulk(set(product_ids))
    for product_id in product_ids:
        if product_id not in products:
            raise InvalidReferenceError(f"Product with ID {product_id} not found", product_id=product_id)

    enriched = []
    for item in items:
        product = products[item['product']]
        price = _explicit_price(item)
        if price is None:
            price = getattr(product, price_field)
        price = _money(price)
        quantity = int(item['quantity'])
        enriched.append(EnrichedItem(
            product_id=product.pk,
            product_name=product.name,
            quantity=quantity,
            price=price,
            total=_money(price * quantity),
        ))
    return enriched


def compute_totals(items, supplied, current=None):
    """
    Resolve the money fields of a document.

    Args:
        items: Enriched items, or ``None`` when the items are not being replaced
        supplied: Validated payload; a key that is present is used verbatim
        current: Stored values of the document being updated, if any

    When items are given, a computed ``total`` is the sum of the line totals
    plus tax minus discount, even if an explicit ``subtotal`` was supplied.
    Without items it is ``subtotal + tax - discount`` from the effective
    values. An update that changes nothing feeding the total keeps it.
    """
    current = current or {}

    items_subtotal = None
    if items is not None:
        items_subtotal = _money(sum((item.total for item in items), ZERO))

    if 'subtotal' in supplied:
        subtotal = _money(supplied['subtotal'])
    elif items_subtotal is not None:
        subtotal = items_subtotal
    else:
        subtotal = _money(current.get('subtotal'))

    tax = _money(supplied['tax']) if 'tax' in supplied else _money(current.get('tax'))
    discount = _money(supplied['discount']) if 'discount' in supplied else _money(current.get('discount'))

    changed = items is not None or any(name in supplied for name in ('subtotal', 'tax', 'discount'))
    if 'total' in supplied:
        total = _money(supplied['total'])
    elif current and not changed:
        total = _money(current.get('total'))
    elif items_subtotal is not None:
        total = items_subtotal + tax - discount
    else:
        total = subtotal + tax - discount

    return Totals(subtotal=subtotal, tax=tax, discount=discount, total=total)
