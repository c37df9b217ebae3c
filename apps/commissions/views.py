from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema
from apps.accounts.permissions import IsCustomer, IsPlatformAdmin
from apps.deals.models import Vendor
from .models import CommissionEvent, PayoutBatch
from .permissions import IsAdminOrVendor
from .serializers import (
    CommissionEventSerializer,
    PayoutBatchSerializer,
    PayoutBatchDetailSerializer,
    CommissionOverviewSerializer,
    VendorPerformanceSerializer,
    # Input serializers
    RecordClickInputSerializer,
    ConfirmConversionInputSerializer,
    ReportFilterSerializer,
    EventFilterSerializer,
    CreatePayoutBatchInputSerializer,
    MarkBatchPaidInputSerializer,
    PayoutBatchFilterSerializer,
)
from .services import (
    CommissionReports,
    record_click as record_click_service,
    confirm_conversion,
    create_payout_batch,
    mark_batch_paid,
)


class CommissionPagination(PageNumberPagination):
    """Custom pagination for commission events and batches."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


@extend_schema(
    request=RecordClickInputSerializer,
    responses={201: CommissionEventSerializer},
    description="Record a customer's affiliate click on a monetized online deal.",
    tags=['commissions'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCustomer])
def record_click(request):
    """Record an affiliate click."""
    serializer = RecordClickInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    event = record_click_service(**serializer.validated_data)
    return Response(CommissionEventSerializer(event).data, status=status.HTTP_201_CREATED)


class CommissionEventViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Commission ledger (admin only).

    list: Events filtered by date range, status, type and vendor
    retrieve: One event
    confirm: Confirm a pending click as a conversion
    """

    serializer_class = CommissionEventSerializer
    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    pagination_class = CommissionPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Filter events using input serializer validation."""
        queryset = CommissionEvent.objects.select_related('vendor', 'deal')

        if self.action != 'list':
            return queryset

        filter_serializer = EventFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = CommissionReports.filtered_events(
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            status=params.get('status'),
            vendor_id=params.get('vendor'),
        ).select_related('vendor', 'deal')

        if 'event_type' in params:
            queryset = queryset.filter(event_type=params['event_type'])
        if params.get('unbatched'):
            queryset = queryset.filter(payout_batch__isnull=True)

        return queryset

    @extend_schema(request=ConfirmConversionInputSerializer, responses={200: CommissionEventSerializer})
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """
        Confirm a conversion with the merchant-reported sale amount.

        POST /api/commissions/events/{id}/confirm/
        Body: {"sale_amount": "2499.00"}
        """
        serializer = ConfirmConversionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        event = confirm_conversion(
            event_id=pk,
            sale_amount=serializer.validated_data.get('sale_amount'),
            confirmed_by=request.user,
        )
        return Response(CommissionEventSerializer(event).data)


@extend_schema(
    parameters=[ReportFilterSerializer],
    responses={200: CommissionOverviewSerializer},
    description="Platform-wide commission totals.",
    tags=['commissions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def overview(request):
    """Commission revenue overview."""
    filter_serializer = ReportFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    data = CommissionReports.overview(
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
        status=params.get('status'),
    )
    return Response(CommissionOverviewSerializer(data).data)


@extend_schema(
    parameters=[ReportFilterSerializer],
    responses={200: VendorPerformanceSerializer(many=True)},
    description="Per-vendor clicks, conversions and commission. Vendors only see their own row.",
    tags=['commissions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrVendor])
def performance(request):
    """Vendor commission performance."""
    filter_serializer = ReportFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    vendor_id = params.get('vendor')
    if not request.user.is_platform_admin:
        vendor = Vendor.objects.filter(user=request.user).first()
        if vendor is None:
            return Response([])
        vendor_id = vendor.id

    rows = CommissionReports.vendor_performance(
        vendor_id=vendor_id,
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
        status=params.get('status'),
    )
    return Response(VendorPerformanceSerializer(rows, many=True).data)


class PayoutBatchViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Payout batches (admin only).

    list: All batches (filter by vendor and status)
    create: Batch a vendor's confirmed events for a period
    retrieve: Batch with its events
    mark_paid: Record the payout
    """

    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    pagination_class = CommissionPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        queryset = PayoutBatch.objects.select_related('vendor')

        if self.action == 'retrieve':
            return queryset.prefetch_related('events', 'events__deal', 'events__vendor')
        queryset = queryset.prefetch_related('events')

        filter_serializer = PayoutBatchFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'vendor' in params:
            queryset = queryset.filter(vendor_id=params['vendor'])
        if 'status' in params:
            queryset = queryset.filter(status=params['status'])

        return queryset

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return CreatePayoutBatchInputSerializer
        elif self.action == 'retrieve':
            return PayoutBatchDetailSerializer
        return PayoutBatchSerializer

    @extend_schema(request=CreatePayoutBatchInputSerializer, responses={201: PayoutBatchSerializer})
    def create(self, request, *args, **kwargs):
        """Create a payout batch."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        batch = create_payout_batch(created_by=request.user, **serializer.validated_data)

        return Response(
            PayoutBatchSerializer(batch).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(request=MarkBatchPaidInputSerializer, responses={200: PayoutBatchSerializer})
    @action(detail=True, methods=['post'], url_path='mark-paid')
    def mark_paid(self, request, pk=None):
        """
        Mark a batch as paid.

        POST /api/commissions/payouts/{id}/mark-paid/
        Body: {"payment_method": "bank_transfer", "transaction_reference": "UTR123"}
        """
        serializer = MarkBatchPaidInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        batch = mark_batch_paid(
            batch_id=pk,
            paid_by=request.user,
            **serializer.validated_data
        )
        return Response(PayoutBatchSerializer(batch).data)
