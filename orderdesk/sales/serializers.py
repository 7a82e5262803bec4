from rest_framework import serializers
from orderdesk.core.fields import OptionalReferenceField
from orderdesk.core.serializers import DocumentWriteSerializer, LineItemSerializer
from .models import SalesOrder


class SalesOrderWriteSerializer(DocumentWriteSerializer):
    order_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    customer = OptionalReferenceField()
    customer_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    customer_email = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    customer_phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    customer_address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    order_date = serializers.DateField(required=False)
    delivery_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=SalesOrder.STATUS_CHOICES, required=False)


class SalesOrderSerializer(serializers.ModelSerializer):
    items = LineItemSerializer(many=True, read_only=True)
    has_invoice = serializers.SerializerMethodField()

    class Meta:
        model = SalesOrder
        fields = ['id', 'order_number', 'customer', 'customer_name', 'customer_email', 'customer_phone',
                  'customer_address', 'order_date', 'delivery_date', 'items', 'subtotal', 'tax', 'discount',
                  'total', 'status', 'notes', 'stock_applied', 'has_invoice', 'created_by', 'created_at',
                  'updated_at']
        read_only_fields = fields

    def get_has_invoice(self, obj):
        annotated = getattr(obj, 'annotated_has_invoice', None)
        if annotated is not None:
            return annotated
        return obj.invoices.exists()
