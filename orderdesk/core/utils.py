"""Utility functions for audit logging and record lookup"""
import logging

from django.db import transaction

from .exceptions import NotFoundError
from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, status_change, stock_sale, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., product or customer name)
        object_reference: Reference identifier (e.g., order number, invoice number)

    Failures are logged and never propagate to the caller.
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    try:
        # savepoint keeps a failed insert from poisoning the caller's transaction
        with transaction.atomic():
            return AuditLog.objects.create(
                user=audit_user if audit_user and audit_user.is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_name=object_name,
                object_reference=object_reference,
                changes=changes or {},
                ip_address=get_client_ip(request),
            )
    except Exception as e:
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def get_object_or_not_found(queryset_or_model, message=None, **lookup):
    """Like get_object_or_404 but raises the API's NotFoundError"""
    queryset = getattr(queryset_or_model, '_default_manager', queryset_or_model)
    if hasattr(queryset, 'all'):
        queryset = queryset.all()
    try:
        return queryset.get(**lookup)
    except queryset.model.DoesNotExist:
        raise NotFoundError(message or f"{queryset.model._meta.verbose_name.capitalize()} not found")
