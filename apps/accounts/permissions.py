"""
Role-based permission classes shared by every API app.

Usage:
    @permission_classes([IsAuthenticated, IsVendor])
    def verify_claim_code(request):
        ...
"""
from rest_framework.permissions import BasePermission

from .models import UserRole


class IsCustomer(BasePermission):
    """Allow access only to customer accounts."""

    message = 'Only customers can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.CUSTOMER)


class IsVendor(BasePermission):
    """
    Allow access only to vendor accounts that own a vendor profile.

    The resolved profile is cached on the request as ``request.vendor`` so
    views don't have to look it up twice.
    """

    message = 'Only vendors can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated and user.role == UserRole.VENDOR):
            return False

        from apps.deals.models import Vendor
        vendor = Vendor.objects.filter(user=user).first()
        if vendor is None:
            self.message = 'Vendor profile not found for this account.'
            return False

        request.vendor = vendor
        return True


class IsPlatformAdmin(BasePermission):
    """Allow access only to platform administrators."""

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_platform_admin)
