"""Response envelope helpers shared by every app"""
from django.core.paginator import Paginator
from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, status_code=status.HTTP_200_OK, **extra):
    body = {'success': True, 'data': data}
    body.update(extra)
    return Response(body, status=status_code)


def _query_int(request, name, default, minimum=1, maximum=None):
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        value = default
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def paginated_response(request, queryset, serializer_class, default_limit=15, context=None):
    """Paginate a queryset with Django's Paginator and wrap it in the success envelope"""
    page = _query_int(request, 'page', 1)
    limit = _query_int(request, 'limit', default_limit, maximum=100)

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    return success_response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })
