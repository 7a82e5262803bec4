from rest_framework import serializers
from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=255)
    parent_name = serializers.CharField(source='parent.name', read_only=True, default=None)
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'parent', 'parent_name', 'image_url', 'image_public_id',
                  'product_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_parent(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError('A category cannot be its own parent.')
        return value


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'category', 'category_name', 'sku', 'description', 'price', 'cost',
                  'stock', 'min_stock', 'unit', 'barcode', 'image_url', 'image_public_id', 'gallery',
                  'is_low_stock', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_gallery(self, value):
        if not isinstance(value, list) or not all(isinstance(entry, (str, dict)) for entry in value):
            raise serializers.ValidationError('Gallery must be a list of image references.')
        return value

    def validate(self, attrs):
        for field in ('price', 'cost'):
            if attrs.get(field) is not None and attrs[field] < 0:
                raise serializers.ValidationError({field: 'Must not be negative.'})
        return attrs
