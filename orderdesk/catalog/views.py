import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q
from orderdesk.core.exceptions import ValidationError
from orderdesk.core.responses import success_response, paginated_response
from orderdesk.core.utils import create_audit_log, get_object_or_not_found
from .filters import ProductFilter, low_stock_q
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer

logger = logging.getLogger(__name__)


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        queryset = Category.objects.select_related('parent').annotate(product_count=Count('products'))
        search = request.query_params.get('search')
        parent = request.query_params.get('parent')
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
        if parent:
            queryset = queryset.filter(parent_id=parent)
        return success_response(CategorySerializer(queryset, many=True).data)

    serializer = CategorySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    category = serializer.save()
    create_audit_log(request=request, action='create', model_name='Category', object_id=category.id,
                     object_name=category.name)
    return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_not_found(
        Category.objects.select_related('parent').annotate(product_count=Count('products')),
        'Category not found', pk=pk,
    )

    if request.method == 'GET':
        return success_response(CategorySerializer(category).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='Category', object_id=category.id,
                         object_name=category.name)
        return success_response(serializer.data)

    data = CategorySerializer(category).data
    category.delete()
    create_audit_log(request=request, action='delete', model_name='Category', object_id=pk,
                     object_name=data['name'])
    return success_response(data)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all products or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('category').all()
        filterset = ProductFilter(request.query_params, queryset=queryset)
        queryset = filterset.qs.order_by('-created_at', '-id')
        return paginated_response(request, queryset, ProductSerializer, default_limit=50)

    serializer = ProductSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    product = serializer.save()
    logger.info(f"Created product {product.id} ({product.name}) with stock {product.stock}")
    create_audit_log(request=request, action='create', model_name='Product', object_id=product.id,
                     object_name=product.name, changes={'stock': product.stock})
    return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_low_stock(request):
    """Products at or below their reorder level"""
    threshold = request.query_params.get('threshold')
    if threshold is not None:
        try:
            threshold = int(threshold)
        except ValueError:
            raise ValidationError('threshold must be an integer')
    queryset = Product.objects.select_related('category').filter(low_stock_q(threshold)).order_by('stock', 'name')
    return success_response(ProductSerializer(queryset, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_not_found(Product.objects.select_related('category'), 'Product not found', pk=pk)

    if request.method == 'GET':
        return success_response(ProductSerializer(product).data)

    if request.method in ('PUT', 'PATCH'):
        old_stock = product.stock
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        if product.stock != old_stock:
            logger.info(f"Product {product.id} stock set manually from {old_stock} to {product.stock}")
            create_audit_log(request=request, action='stock_adjust', model_name='Product', object_id=product.id,
                             object_name=product.name, changes={'old_stock': old_stock, 'new_stock': product.stock})
        else:
            create_audit_log(request=request, action='update', model_name='Product', object_id=product.id,
                             object_name=product.name)
        return success_response(serializer.data)

    data = ProductSerializer(product).data
    product.delete()
    create_audit_log(request=request, action='delete', model_name='Product', object_id=pk,
                     object_name=data['name'])
    return success_response(data)
