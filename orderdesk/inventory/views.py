import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from orderdesk.catalog.models import Product
from orderdesk.core.exceptions import ValidationError
from orderdesk.core.responses import success_response, paginated_response
from orderdesk.core.utils import create_audit_log, get_object_or_not_found
from .models import StockRecord
from .serializers import StockRecordSerializer
from .services import adjust_product_stock

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_list_create(request):
    """List stock records or record a new batch (adds its quantity to the product)"""
    if request.method == 'GET':
        queryset = StockRecord.objects.select_related('product').order_by('-created_at', '-id')
        product = request.query_params.get('product')
        location = request.query_params.get('location')
        if product:
            queryset = queryset.filter(product_id=product)
        if location:
            queryset = queryset.filter(location__icontains=location)
        return paginated_response(request, queryset, StockRecordSerializer, default_limit=50)

    serializer = StockRecordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        record = serializer.save()
        adjust_product_stock(record.product_id, record.quantity)
    create_audit_log(request=request, action='stock_adjust', model_name='StockRecord', object_id=record.id,
                     object_name=record.product.name, changes={'quantity': record.quantity})
    return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_low(request):
    """Stock records whose quantity is at or below ``threshold`` (default 10)"""
    try:
        threshold = int(request.query_params.get('threshold', 10))
    except ValueError:
        raise ValidationError('threshold must be an integer')
    queryset = StockRecord.objects.select_related('product').filter(quantity__lte=threshold).order_by('quantity')
    return success_response(StockRecordSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_by_product(request, product_id):
    """All stock records of one product"""
    get_object_or_not_found(Product, 'Product not found', pk=product_id)
    queryset = StockRecord.objects.select_related('product').filter(product_id=product_id)
    return success_response(StockRecordSerializer(queryset, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def stock_detail(request, pk):
    """Retrieve, update or delete a stock record, keeping product stock in step"""
    record = get_object_or_not_found(StockRecord.objects.select_related('product'), 'Stock record not found', pk=pk)

    if request.method == 'GET':
        return success_response(StockRecordSerializer(record).data)

    if request.method in ('PUT', 'PATCH'):
        old_product_id, old_quantity = record.product_id, record.quantity
        serializer = StockRecordSerializer(record, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            record = serializer.save()
            if record.product_id != old_product_id:
                adjust_product_stock(old_product_id, -old_quantity)
                adjust_product_stock(record.product_id, record.quantity)
            else:
                adjust_product_stock(record.product_id, record.quantity - old_quantity)
        create_audit_log(request=request, action='stock_adjust', model_name='StockRecord', object_id=record.id,
                         object_name=record.product.name,
                         changes={'old_quantity': old_quantity, 'new_quantity': record.quantity})
        return success_response(serializer.data)

    data = StockRecordSerializer(record).data
    with transaction.atomic():
        adjust_product_stock(record.product_id, -record.quantity)
        record.delete()
    create_audit_log(request=request, action='stock_adjust', model_name='StockRecord', object_id=pk,
                     object_name=data['product_name'], changes={'removed_quantity': data['quantity']})
    return success_response(data)
