from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allows access to superusers and users with the ``admin`` role"""
    message = 'Admin role required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role)
