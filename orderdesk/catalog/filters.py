import django_filters
from django.db.models import F, Q
from .models import Product, DEFAULT_LOW_STOCK_THRESHOLD


def low_stock_q(threshold=None):
    """Products at or below their own minimum, or the default threshold when none is set"""
    if threshold is not None:
        return Q(stock__lte=threshold)
    return (
        Q(min_stock__gt=0, stock__lte=F('min_stock'))
        | Q(min_stock__lte=0, stock__lte=DEFAULT_LOW_STOCK_THRESHOLD)
    )


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'low_stock', 'out_of_stock']

    def filter_search(self, queryset, name, value):
        """Case-insensitive match on name, SKU, barcode and description"""
        search = (value or '').strip()
        if not search:
            return queryset
        return queryset.filter(
            Q(name__icontains=search)
            | Q(sku__icontains=search)
            | Q(barcode__iexact=search)
            | Q(description__icontains=search)
        )

    def filter_low_stock(self, queryset, name, value):
        if str(value).lower() in ('true', '1', 'yes'):
            return queryset.filter(low_stock_q())
        return queryset

    def filter_out_of_stock(self, queryset, name, value):
        if str(value).lower() in ('true', '1', 'yes'):
            return queryset.filter(stock__lte=0)
        return queryset
