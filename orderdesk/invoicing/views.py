from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from orderdesk.core.responses import success_response, paginated_response
from orderdesk.core.sequences import INVOICE_PREFIX, peek_next_number
from orderdesk.core.utils import get_object_or_not_found
from orderdesk.sales.models import SalesOrder
from .models import Invoice
from .serializers import InvoiceSerializer, InvoiceWriteSerializer, GenerateInvoiceSerializer
from .services import InvoiceService


def invoice_queryset():
    return Invoice.objects.select_related('sales_order').prefetch_related('items')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List invoices or create one manually"""
    if request.method == 'GET':
        queryset = invoice_queryset()

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
            queryset = queryset.filter(invoice_date__gte=start_date)
        if end_date:
            queryset = queryset.filter(invoice_date__lte=end_date)
        if search:
            queryset = queryset.filter(Q(invoice_number__icontains=search) | Q(customer_name__icontains=search))

        queryset = queryset.order_by('-created_at', '-id')
        return paginated_response(request, queryset, InvoiceSerializer)

    serializer = InvoiceWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    invoice = InvoiceService(request).create(serializer.validated_data)
    invoice = invoice_queryset().get(pk=invoice.pk)
    return success_response(InvoiceSerializer(invoice).data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_next_number(request):
    """Preview of the next invoice number"""
    return success_response({'invoice_number': peek_next_number(Invoice, 'invoice_number', INVOICE_PREFIX)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_from_sales_order(request, sales_order_id):
    """Generate a paid invoice from a confirmed or completed sales order"""
    serializer = GenerateInvoiceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    invoice = InvoiceService(request).generate_from_sales_order(sales_order_id, **serializer.validated_data)
    invoice = invoice_queryset().get(pk=invoice.pk)
    return success_response(InvoiceSerializer(invoice).data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_by_sales_order(request, sales_order_id):
    """Invoices referencing a sales order"""
    get_object_or_not_found(SalesOrder, 'Sales order not found', pk=sales_order_id)
    queryset = invoice_queryset().filter(sales_order_id=sales_order_id).order_by('id')
    return success_response(InvoiceSerializer(queryset, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    """Retrieve, update or delete an invoice"""
    invoice = get_object_or_not_found(invoice_queryset(), 'Invoice not found', pk=pk)

    if request.method == 'GET':
        return success_response(InvoiceSerializer(invoice).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = InvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        InvoiceService(request).update(invoice, serializer.validated_data)
        invoice = invoice_queryset().get(pk=pk)
        return success_response(InvoiceSerializer(invoice).data)

    data = InvoiceSerializer(invoice).data
    InvoiceService(request).delete(invoice)
    return success_response(data)
