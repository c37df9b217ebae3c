from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from apps.accounts.models import UserRole
from apps.accounts.permissions import IsCustomer, IsVendor
from apps.claims.serializers import ClaimIssuanceSerializer
from apps.claims.services import issue_claim
from .models import Deal, Vendor
from .serializers import (
    DealSerializer,
    VendorDealSerializer,
    DealCreateSerializer,
    DealFilterSerializer,
)
from .services import create_deal


class DealPagination(PageNumberPagination):
    """Custom pagination for deals."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class DealViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for deals.

    list: Vendors get their own deals, everyone else the claimable catalogue
    create: Create a new deal (vendors only)
    retrieve: Get a specific deal
    claim: Issue a claim for the current customer
    """

    queryset = Deal.objects.select_related('vendor')
    serializer_class = DealSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = DealPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_permissions(self):
        """Use different permissions for different actions."""
        if self.action == 'create':
            return [IsAuthenticated(), IsVendor()]
        elif self.action == 'claim':
            return [IsAuthenticated(), IsCustomer()]
        return super().get_permissions()

    def _own_vendor(self):
        if self.request.user.role != UserRole.VENDOR:
            return None
        return Vendor.objects.filter(user=self.request.user).first()

    def get_queryset(self):
        """Filter deals using input serializer validation."""
        queryset = super().get_queryset()

        filter_serializer = DealFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        vendor = self._own_vendor()
        if vendor is not None:
            queryset = queryset.filter(vendor=vendor)
            if params.get('is_active') is not None:
                queryset = queryset.filter(is_active=params['is_active'])
        else:
            queryset = queryset.filter(
                is_active=True,
                is_approved=True,
                valid_until__gt=timezone.now(),
            )

        if 'kind' in params:
            queryset = queryset.filter(kind=params['kind'])

        return queryset

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return DealCreateSerializer
        if self._own_vendor() is not None:
            return VendorDealSerializer
        return DealSerializer

    @extend_schema(request=DealCreateSerializer, responses={201: VendorDealSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new deal for the requesting vendor."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        deal = create_deal(vendor=request.vendor, **serializer.validated_data)

        return Response(
            VendorDealSerializer(deal).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(request=None, responses={201: ClaimIssuanceSerializer})
    @action(detail=True, methods=['post'])
    def claim(self, request, pk=None):
        """
        Issue a claim for this deal.

        POST /api/deals/{id}/claim/
        """
        issuance = issue_claim(deal_id=pk, customer=request.user)
        return Response(
            ClaimIssuanceSerializer(issuance).data,
            status=status.HTTP_201_CREATED
        )
