"""Permission classes for commission reporting."""
from rest_framework.permissions import BasePermission

from apps.accounts.models import UserRole


class IsAdminOrVendor(BasePermission):
    """
    Admins see every vendor's figures; vendors only their own.

    Views scope the data themselves based on the role; this class only
    keeps customers out.
    """

    message = 'Only administrators and vendors can view commission performance.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_platform_admin or user.role == UserRole.VENDOR
