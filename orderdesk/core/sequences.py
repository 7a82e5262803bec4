"""
Document number allocation.

Numbers look like ``SO-2026-000042``: a prefix, the calendar year and a
six-digit, zero-padded sequence that restarts every year. Allocation locks a
``DocumentSequence`` counter row for the prefix/year and the newest document
carrying the same stem, so concurrent callers are serialized and the counter
never falls behind a number that was stored directly by a client.
"""
import logging

from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone

from .models import DocumentSequence

logger = logging.getLogger(__name__)

SALES_ORDER_PREFIX = 'SO'
PURCHASE_ORDER_PREFIX = 'PO'
INVOICE_PREFIX = 'INV'

SEQUENCE_WIDTH = 6


def format_number(prefix: str, year: int, value: int) -> str:
    return f"{prefix}-{year}-{value:0{SEQUENCE_WIDTH}d}"


def parse_sequence(number, stem: str) -> int:
    """Trailing integer of ``number`` after ``stem``; 0 if it is not numeric"""
    if not number or not number.startswith(stem):
        return 0
    try:
        return int(number[len(stem):])
    except ValueError:
        return 0


def _latest_issued(model, field, stem, using, lock=False):
    queryset = model._default_manager.using(using).filter(
        **{f'{field}__startswith': stem}
    ).order_by('-created_at', '-pk')
    if lock:
        queryset = queryset.select_for_update()
    return queryset.values_list(field, flat=True).first()


def next_number(model, field: str, prefix: str, year=None, using=DEFAULT_DB_ALIAS) -> str:
    """
    Allocate the next document number for ``prefix`` in ``year``.

    Args:
        model: Document model whose ``field`` stores the numbers
        field: Name of the number field on ``model``
        prefix: ``SO``, ``PO`` or ``INV``
        year: Calendar year; defaults to the current year
        using: Database alias

    Must run inside the caller's transaction for the lock to cover the
    insert of the document that receives the number.
    """
    year = year or timezone.now().year
    stem = f"{prefix}-{year}-"

    with transaction.atomic(using=using):
        counter, _ = DocumentSequence.objects.using(using).select_for_update().get_or_create(
            prefix=prefix, year=year,
        )
        latest = _latest_issued(model, field, stem, using, lock=True)
        value = max(counter.last_value, parse_sequence(latest, stem)) + 1
        counter.last_value = value
        counter.save(using=using, update_fields=['last_value', 'updated_at'])

    number = format_number(prefix, year, value)
    logger.info(f"Allocated document number {number}")
    return number


def peek_next_number(model, field: str, prefix: str, year=None, using=DEFAULT_DB_ALIAS) -> str:
    """Number the next allocation would return, without consuming it"""
    year = year or timezone.now().year
    stem = f"{prefix}-{year}-"
    last_value = DocumentSequence.objects.using(using).filter(
        prefix=prefix, year=year,
    ).values_list('last_value', flat=True).first() or 0
    latest = _latest_issued(model, field, stem, using)
    return format_number(prefix, year, max(last_value, parse_sequence(latest, stem)) + 1)
