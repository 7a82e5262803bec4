from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from orderdesk.core.responses import success_response, paginated_response
from orderdesk.core.sequences import PURCHASE_ORDER_PREFIX, peek_next_number
from orderdesk.core.utils import get_object_or_not_found
from .models import PurchaseOrder
from .serializers import PurchaseOrderSerializer, PurchaseOrderWriteSerializer
from .services import PurchaseOrderService


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_order_list_create(request):
    """List purchase orders or create a new one"""
    if request.method == 'GET':
        queryset = PurchaseOrder.objects.all().prefetch_related('items')

        # Filters
        status_filter = request.query_params.get('status')
        supplier = request.query_params.get('supplier')
        start_date = request.query_params.get('start_date')
        end_date = request.query_params.get('end_date')
        search = request.query_params.get('search')

        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        if start_date:
            queryset = queryset.filter(order_date__gte=start_date)
        if end_date:
            queryset = queryset.filter(order_date__lte=end_date)
        if search:
            queryset = queryset.filter(Q(order_number__icontains=search) | Q(supplier_name__icontains=search))

        queryset = queryset.order_by('-created_at', '-id')
        return paginated_response(request, queryset, PurchaseOrderSerializer)

    serializer = PurchaseOrderWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = PurchaseOrderService(request).create(serializer.validated_data)
    order = PurchaseOrder.objects.prefetch_related('items').get(pk=order.pk)
    return success_response(PurchaseOrderSerializer(order).data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_order_next_number(request):
    """Preview of the number the next purchase order will receive"""
    return success_response({'order_number': peek_next_number(PurchaseOrder, 'order_number', PURCHASE_ORDER_PREFIX)})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_order_detail(request, pk):
    """Retrieve, update or delete a purchase order"""
    order = get_object_or_not_found(PurchaseOrder.objects.prefetch_related('items'), 'Purchase order not found', pk=pk)

    if request.method == 'GET':
        return success_response(PurchaseOrderSerializer(order).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = PurchaseOrderWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        PurchaseOrderService(request).update(order, serializer.validated_data)
        order = PurchaseOrder.objects.prefetch_related('items').get(pk=pk)
        return success_response(PurchaseOrderSerializer(order).data)

    data = PurchaseOrderSerializer(order).data
    PurchaseOrderService(request).delete(order)
    return success_response(data)
