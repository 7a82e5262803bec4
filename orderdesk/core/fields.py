"""Serializer fields shared by order and invoice payloads"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from rest_framework import serializers

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


class LenientDecimalField(serializers.DecimalField):
    """
    Money field that never rejects a value for being unparseable.

    Blank or garbage input becomes 0.00; ``None`` becomes 0.00 unless the
    field allows null, in which case it is kept as ``None`` so callers can
    treat it as "not supplied". Values are rounded half-up to cents.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault('max_digits', 12)
        kwargs.setdefault('decimal_places', 2)
        kwargs.setdefault('required', False)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data is None:
            return (True, None if self.allow_null else ZERO)
        if isinstance(data, str) and not data.strip():
            return (True, None if self.allow_null else ZERO)
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        if isinstance(data, bool):
            return ZERO
        try:
            value = Decimal(str(data).strip())
        except (InvalidOperation, ValueError, TypeError):
            return ZERO
        if not value.is_finite():
            return ZERO
        return super().to_internal_value(value.quantize(CENT, rounding=ROUND_HALF_UP))


class OptionalReferenceField(serializers.IntegerField):
    """Primary-key reference where ``""`` and ``null`` both mean "no link" """

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        kwargs.setdefault('min_value', 1)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if isinstance(data, str) and not data.strip():
            return (True, None)
        return super().validate_empty_values(data)
