from rest_framework import serializers
from .models import Customer, Supplier

PARTY_FIELDS = ['id', 'name', 'email', 'phone', 'address', 'city', 'state', 'zip_code', 'country',
                'tax_id', 'payment_terms', 'current_balance', 'status', 'notes', 'created_at', 'updated_at']


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = PARTY_FIELDS + ['credit_limit']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Name is required.')
        return value.strip()


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = PARTY_FIELDS + ['bank_details']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Name is required.')
        return value.strip()
