from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.core.cache import cache
from orderdesk.core.responses import success_response
from orderdesk.core.utils import create_audit_log, get_object_or_not_found
from .cache import CUSTOMER_LIST, SUPPLIER_LIST, PARTY_LIST_CACHE_TTL, get_list_cache_key
from .models import Customer, Supplier
from .serializers import CustomerSerializer, SupplierSerializer


def _list_parties(request, model, serializer_class, cache_kind):
    search = (request.query_params.get('search') or '').strip()
    status_filter = (request.query_params.get('status') or '').strip()

    # Try cache first
    cache_key = get_list_cache_key(cache_kind, f"{search}|{status_filter}")
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        return success_response(cached_data)

    # Cache miss - fetch from database
    queryset = model.objects.all().order_by('-created_at', '-id')
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(email__icontains=search) | Q(phone__icontains=search)
        )
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    data = serializer_class(queryset, many=True).data

    cache.set(cache_key, data, PARTY_LIST_CACHE_TTL)
    return success_response(data)


def _create_party(request, serializer_class, model_name):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    party = serializer.save()
    create_audit_log(request=request, action='create', model_name=model_name, object_id=party.id,
                     object_name=party.name)
    return success_response(serializer.data, status_code=status.HTTP_201_CREATED)


def _party_detail(request, party, serializer_class, model_name):
    if request.method == 'GET':
        return success_response(serializer_class(party).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = serializer_class(party, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(request=request, action='update', model_name=model_name, object_id=party.id,
                         object_name=party.name)
        return success_response(serializer.data)

    # Referenced parties are protected; the exception handler turns that into a 400
    data = serializer_class(party).data
    party_id = party.id
    party.delete()
    create_audit_log(request=request, action='delete', model_name=model_name, object_id=party_id,
                     object_name=data['name'])
    return success_response(data)


# Customer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List all customers or create a new customer"""
    if request.method == 'GET':
        return _list_parties(request, Customer, CustomerSerializer, CUSTOMER_LIST)
    return _create_party(request, CustomerSerializer, 'Customer')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    customer = get_object_or_not_found(Customer, 'Customer not found', pk=pk)
    return _party_detail(request, customer, CustomerSerializer, 'Customer')


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        return _list_parties(request, Supplier, SupplierSerializer, SUPPLIER_LIST)
    return _create_party(request, SupplierSerializer, 'Supplier')


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_not_found(Supplier, 'Supplier not found', pk=pk)
    return _party_detail(request, supplier, SupplierSerializer, 'Supplier')
