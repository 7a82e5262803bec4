from rest_framework import serializers
from .models import StockRecord


class StockRecordSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)

    class Meta:
        model = StockRecord
        fields = ['id', 'product', 'product_name', 'product_sku', 'quantity', 'location', 'warehouse_section',
                  'batch_number', 'expiry_date', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {
            'product': {'error_messages': {'does_not_exist': 'Invalid product ID'}},
        }
