from rest_framework import serializers
from orderdesk.core.fields import OptionalReferenceField
from orderdesk.core.serializers import DocumentWriteSerializer, LineItemSerializer
from .models import PurchaseOrder


class PurchaseOrderWriteSerializer(DocumentWriteSerializer):
    order_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    supplier = OptionalReferenceField()
    supplier_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    supplier_email = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    supplier_phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    supplier_address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    order_date = serializers.DateField(required=False)
    expected_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=PurchaseOrder.STATUS_CHOICES, required=False)


class PurchaseOrderSerializer(serializers.ModelSerializer):
    items = LineItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = ['id', 'order_number', 'supplier', 'supplier_name', 'supplier_email', 'supplier_phone',
                  'supplier_address', 'order_date', 'expected_date', 'items', 'subtotal', 'tax', 'discount',
                  'total', 'status', 'notes', 'stock_applied', 'created_by', 'created_at', 'updated_at']
        read_only_fields = fields
