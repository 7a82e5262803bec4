from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .fields import LenientDecimalField
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role', 'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_superuser', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone', 'role']

    def validate(self, attrs):
        confirm = attrs.get('password_confirm')
        if confirm is not None and attrs['password'] != confirm:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm', None)
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class RegisterSerializer(UserCreateSerializer):
    """Self-service registration; the role is always the default one"""

    class Meta(UserCreateSerializer.Meta):
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']


class LineItemInputSerializer(serializers.Serializer):
    """Submitted line item; ``unit_price`` is accepted as an alias of ``price``"""
    product = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    price = LenientDecimalField(allow_null=True)
    unit_price = LenientDecimalField(allow_null=True)


class DocumentWriteSerializer(serializers.Serializer):
    """Fields common to order and invoice payloads; money fields are lenient"""
    items = LineItemInputSerializer(many=True, required=False)
    subtotal = LenientDecimalField()
    tax = LenientDecimalField()
    discount = LenientDecimalField()
    total = LenientDecimalField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class LineItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    product = serializers.IntegerField(source='product_id', read_only=True)
    product_name = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
