from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Exists, OuterRef, Q
from orderdesk.core.responses import success_response, paginated_response
from orderdesk.core.sequences import SALES_ORDER_PREFIX, peek_next_number
from orderdesk.core.utils import get_object_or_not_found
from orderdesk.invoicing.models import Invoice
from .models import SalesOrder
from .serializers import SalesOrderSerializer, SalesOrderWriteSerializer
from .services import SalesOrderService


def sales_order_queryset():
    return SalesOrder.objects.prefetch_related('items').annotate(
        annotated_has_invoice=Exists(Invoice.objects.filter(sales_order=OuterRef('pk')))
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sales_order_list_create(request):
    """List sales orders or create a new one"""
    if request.method == 'GET':
        queryset = sales_order_queryset()

        # Filters
        status_filter = request.query_params.get('status')
        customer = request.query_params.get('customer')
        start_date = request.query_params.get('start_date')
        end_date = request.query_params.get('end_date')
        search = request.query_params.get('search')

        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if customer:
            queryset = queryset.filter(customer_id=customer)
        if start_date:
            queryset = queryset.filter(order_date__gte=start_date)
        if end_date:
            queryset = queryset.filter(order_date__lte=end_date)
        if search:
            queryset = queryset.filter(Q(order_number__icontains=search) | Q(customer_name__icontains=search))

        queryset = queryset.order_by('-created_at', '-id')
        return paginated_response(request, queryset, SalesOrderSerializer)

    serializer = SalesOrderWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = SalesOrderService(request).create(serializer.validated_data)
    order = sales_order_queryset().get(pk=order.pk)
    return success_response(SalesOrderSerializer(order).data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_order_next_number(request):
    """Preview of the number the next sales order will receive"""
    return success_response({'order_number': peek_next_number(SalesOrder, 'order_number', SALES_ORDER_PREFIX)})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sales_order_detail(request, pk):
    """Retrieve, update or delete a sales order"""
    order = get_object_or_not_found(sales_order_queryset(), 'Sales order not found', pk=pk)

    if request.method == 'GET':
        return success_response(SalesOrderSerializer(order).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = SalesOrderWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        SalesOrderService(request).update(order, serializer.validated_data)
        order = sales_order_queryset().get(pk=pk)
        return success_response(SalesOrderSerializer(order).data)

    data = SalesOrderSerializer(order).data
    SalesOrderService(request).delete(order)
    return success_response(data)
