"""
Domain errors and the project-wide DRF exception handler.

Every error leaves the API as ``{"success": false, "message": ..., "error": ...}``.
"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class OrderDeskError(APIException):
    """Base class for domain errors; keyword arguments are added to the error body"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'error'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail, code)
        self.extra = extra


class ValidationError(OrderDeskError):
    default_detail = 'Invalid request data.'
    default_code = 'validation_error'


class InvalidReferenceError(OrderDeskError):
    default_detail = 'Referenced record does not exist.'
    default_code = 'invalid_reference'


class NotFoundError(OrderDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class ConflictError(OrderDeskError):
    default_detail = 'Record already exists.'
    default_code = 'conflict'


class InvalidStateError(OrderDeskError):
    default_detail = 'Operation not allowed in the current state.'
    default_code = 'invalid_state'


class InternalError(OrderDeskError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'
    default_code = 'internal_error'


def _expose_errors():
    return settings.DEBUG or getattr(settings, 'ORDERDESK_EXPOSE_ERRORS', False)


def _translate(exc):
    """Map Django-level exceptions onto domain errors"""
    if isinstance(exc, ProtectedError):
        model_name = exc.args[0] if exc.args else 'record'
        return ValidationError(
            f"Cannot delete: {model_name}",
            referenced_by=len(exc.protected_objects),
        )
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            return ValidationError('Invalid request data', errors=exc.message_dict)
        return ValidationError('; '.join(exc.messages))
    return exc


def api_exception_handler(exc, context):
    """Render every exception raised by an API view into the error envelope"""
    exc = _translate(exc)
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}", exc_info=exc)
        body = {'success': False, 'message': 'Internal server error', 'error': None}
        if _expose_errors():
            body['error'] = f"{exc.__class__.__name__}: {exc}"
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, OrderDeskError):
        body = {
            'success': False,
            'message': str(exc.detail),
            'error': exc.default_code,
        }
        body.update(exc.extra)
        if isinstance(exc, InternalError):
            logger.error(f"Internal error: {exc.detail}")
            if not _expose_errors():
                body['error'] = None
    else:
        data = response.data
        if isinstance(data, dict) and set(data.keys()) == {'detail'}:
            detail = data['detail']
            body = {
                'success': False,
                'message': str(detail),
                'error': getattr(detail, 'code', None),
            }
        else:
            body = {
                'success': False,
                'message': 'Invalid request data',
                'error': data,
            }

    response.data = body
    return response
