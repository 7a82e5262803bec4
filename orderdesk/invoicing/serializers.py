from rest_framework import serializers
from orderdesk.core.fields import LenientDecimalField, OptionalReferenceField
from orderdesk.core.serializers import DocumentWriteSerializer, LineItemSerializer
from .models import Invoice


class InvoiceWriteSerializer(DocumentWriteSerializer):
    invoice_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    sales_order = OptionalReferenceField()
    customer = OptionalReferenceField()
    customer_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    customer_email = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    customer_phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    customer_address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    paid_amount = LenientDecimalField()
    payment_method = serializers.CharField(required=False, allow_blank=True, max_length=50)
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES, required=False)


class GenerateInvoiceSerializer(serializers.Serializer):
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class InvoiceSerializer(serializers.ModelSerializer):
    items = LineItemSerializer(many=True, read_only=True)
    sales_order_number = serializers.CharField(source='sales_order.order_number', read_only=True, default=None)
    balance_due = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Invoice
        fields = ['id', 'invoice_number', 'sales_order', 'sales_order_number', 'customer', 'customer_name',
                  'customer_email', 'customer_phone', 'customer_address', 'invoice_date', 'due_date', 'items',
                  'subtotal', 'tax', 'discount', 'total', 'paid_amount', 'balance_due', 'status',
                  'payment_method', 'notes', 'created_by', 'created_at', 'updated_at']
        read_only_fields = fields
