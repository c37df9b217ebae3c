from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from django.db.models import Q
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter
from apps.accounts.permissions import IsCustomer, IsVendor, IsPlatformAdmin
from .models import Claim, ClaimStatus, PosSession, Transaction
from .serializers import (
    ClaimSerializer,
    ClaimVerificationSerializer,
    PosSessionSerializer,
    TransactionSerializer,
    MembershipTokenSerializer,
    MembershipIdentitySerializer,
    PinVerificationSerializer,
    VendorClaimSerializer,
    ClaimAnalyticsSerializer,
    VendorClaimStatsSerializer,
    # Input serializers
    ClaimFilterSerializer,
    MembershipTokenQuerySerializer,
    VerifyClaimCodeInputSerializer,
    VerifyQRInputSerializer,
    VerifyTokenInputSerializer,
    VerifyPinInputSerializer,
    CompleteTransactionInputSerializer,
    PinTransactionInputSerializer,
    TransactionFilterSerializer,
    OpenSessionInputSerializer,
    VendorClaimFilterSerializer,
    ClaimReportFilterSerializer,
)
from .services import (
    ClaimReports,
    issue_membership_token,
    render_membership_qr,
    verify_claim_code as verify_claim_code_service,
    verify_claim_qr,
    verify_membership_token,
    verify_deal_pin,
    complete_transaction,
    complete_pin_transaction,
    open_session,
    close_session,
)


class ClaimPagination(PageNumberPagination):
    """Custom pagination for claims and POS history."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# =============================================================================
# Customer endpoints
# =============================================================================

class ClaimViewSet(viewsets.ReadOnlyModelViewSet):
    """
    The current customer's claims.

    list: All claims, newest first (filter by status or active)
    retrieve: One claim with its QR payload while redeemable
    membership_token: Signed membership token, optionally as a QR image
    """

    serializer_class = ClaimSerializer
    permission_classes = [IsAuthenticated, IsCustomer]
    pagination_class = ClaimPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Filter claims using input serializer validation."""
        queryset = Claim.objects.filter(
            customer=self.request.user
        ).select_related('deal', 'deal__vendor')

        if self.action != 'list':
            return queryset

        filter_serializer = ClaimFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if params.get('active'):
            queryset = queryset.filter(
                ~Q(status=ClaimStatus.USED),
                expires_at__gt=timezone.now(),
            )

        return queryset

    @extend_schema(
        parameters=[OpenApiParameter('qr', bool, description='Include a PNG QR code data URI')],
        responses={200: MembershipTokenSerializer},
    )
    @action(detail=False, methods=['get'], url_path='membership-token')
    def membership_token(self, request):
        """
        Issue a signed membership token for the current customer.

        GET /api/claims/membership-token/?qr=true
        """
        query = MembershipTokenQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        bundle = issue_membership_token(customer=request.user)
        data = {
            'token': bundle.token,
            'payload': bundle.payload,
            'issued_at': bundle.issued_at,
            'expires_at': bundle.expires_at,
            'qr_image': render_membership_qr(bundle.token) if query.validated_data['qr'] else None,
        }
        return Response(MembershipTokenSerializer(data).data)


# =============================================================================
# POS: verification
# =============================================================================

@extend_schema(
    request=VerifyClaimCodeInputSerializer,
    responses={200: ClaimVerificationSerializer},
    description="Verify a customer's claim code and mark the claim verified.",
    tags=['pos'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVendor])
def verify_claim_code(request):
    """Verify a typed claim code."""
    serializer = VerifyClaimCodeInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    claim = verify_claim_code_service(
        code=serializer.validated_data['claim_code'],
        vendor=request.vendor,
    )
    return Response(ClaimVerificationSerializer(claim).data)


@extend_schema(
    request=VerifyQRInputSerializer,
    responses={200: ClaimVerificationSerializer},
    description="Verify a claim from the customer's scanned QR code.",
    tags=['pos'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVendor])
def verify_qr(request):
    """Verify a scanned claim QR code."""
    serializer = VerifyQRInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    claim = verify_claim_qr(
        qr_data=serializer.validated_data['qr_data'],
        vendor=request.vendor,
    )
    return Response(ClaimVerificationSerializer(claim).data)


@extend_schema(
    request=VerifyTokenInputSerializer,
    responses={200: MembershipIdentitySerializer},
    description="Check a customer's membership token. Nothing is consumed.",
    tags=['pos'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVendor])
def verify_token(request):
    """Verify a membership token."""
    serializer = VerifyTokenInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    identity = verify_membership_token(token=serializer.validated_data['token'])
    return Response(MembershipIdentitySerializer(identity).data)


@extend_schema(
    request=VerifyPinInputSerializer,
    responses={200: PinVerificationSerializer},
    description="Identify which of the vendor's deals a PIN belongs to.",
    tags=['pos'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVendor])
def verify_pin(request):
    """Verify a deal PIN."""
    serializer = VerifyPinInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    deal = verify_deal_pin(pin=serializer.validated_data['pin'], vendor=request.vendor)
    return Response(PinVerificationSerializer({'deal': deal, 'valid': True}).data)


@extend_schema(
    request=PinTransactionInputSerializer,
    responses={201: TransactionSerializer},
    description="Complete a sale for a customer who presented the deal PIN.",
    tags=['pos'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsVendor])
def pin_transaction(request):
    """Complete a PIN-based sale."""
    serializer = PinTransactionInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    sale = complete_pin_transaction(vendor=request.vendor, **serializer.validated_data)
    return Response(TransactionSerializer(sale).data, status=status.HTTP_201_CREATED)


# =============================================================================
# POS: transactions and sessions
# =============================================================================

class PosTransactionViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Vendor's completed sales.

    list: Sales history (filter by session and date range)
    create: Complete a sale against a verified claim
    retrieve: One receipt
    """

    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated, IsVendor]
    pagination_class = ClaimPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Filter transactions using input serializer validation."""
        queryset = Transaction.objects.filter(
            vendor=self.request.vendor
        ).select_related('claim', 'deal', 'customer')

        if self.action != 'list':
            return queryset

        filter_serializer = TransactionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'session' in params:
            queryset = queryset.filter(session_id=params['session'])
        if 'date_from' in params:
            queryset = queryset.filter(processed_at__date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(processed_at__date__lte=params['date_to'])

        return queryset

    def get_serializer_class(self):
        if self.action == 'create':
            return CompleteTransactionInputSerializer
        return TransactionSerializer

    @extend_schema(request=CompleteTransactionInputSerializer, responses={201: TransactionSerializer})
    def create(self, request, *args, **kwargs):
        """Consume a verified claim and book the sale."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sale = complete_transaction(vendor=request.vendor, **serializer.validated_data)

        return Response(
            TransactionSerializer(sale).data,
            status=status.HTTP_201_CREATED
        )


class PosSessionViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Vendor's POS sessions.

    list: All sessions, newest first
    create: Open a session for a terminal (returns the open one if any)
    close: Close a session
    """

    serializer_class = PosSessionSerializer
    permission_classes = [IsAuthenticated, IsVendor]
    pagination_class = ClaimPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        return PosSession.objects.filter(vendor=self.request.vendor)

    def get_serializer_class(self):
        if self.action == 'create':
            return OpenSessionInputSerializer
        return PosSessionSerializer

    @extend_schema(request=OpenSessionInputSerializer, responses={201: PosSessionSerializer, 200: PosSessionSerializer})
    def create(self, request, *args, **kwargs):
        """Open (or resume) the session for a terminal."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session, created = open_session(
            vendor=request.vendor,
            terminal_id=serializer.validated_data['terminal_id'],
        )
        return Response(
            PosSessionSerializer(session).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @extend_schema(request=None, responses={200: PosSessionSerializer})
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """
        Close a session.

        POST /api/pos/sessions/{id}/close/
        """
        session = close_session(session_id=pk, vendor=request.vendor)
        return Response(PosSessionSerializer(session).data)


# =============================================================================
# POS: claims on the vendor's deals
# =============================================================================

class VendorClaimViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Claims on the current vendor's deals, whatever their state.

    list: Newest first (filter by effective_status or deal)
    retrieve: One claim
    stats: Claim funnel for the vendor, overall and per deal
    """

    serializer_class = VendorClaimSerializer
    permission_classes = [IsAuthenticated, IsVendor]
    pagination_class = ClaimPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Filter claims using input serializer validation."""
        queryset = Claim.objects.filter(
            deal__vendor=self.request.vendor
        ).select_related('deal', 'customer')

        if self.action != 'list':
            return queryset

        filter_serializer = VendorClaimFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'deal' in params:
            queryset = queryset.filter(deal_id=params['deal'])
        if 'effective_status' in params:
            queryset = ClaimReports.with_effective_status(queryset, params['effective_status'])

        return queryset

    @extend_schema(parameters=[ClaimReportFilterSerializer], responses={200: VendorClaimStatsSerializer})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        """
        Claim funnel for the current vendor.

        GET /api/pos/claims/stats/?start_date=2026-01-01&end_date=2026-01-31
        """
        filter_serializer = ClaimReportFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        period = {'start_date': params.get('start_date'), 'end_date': params.get('end_date')}
        data = {
            'summary': ClaimReports.summary(vendor_id=request.vendor.id, **period),
            'deals': ClaimReports.deal_breakdown(vendor_id=request.vendor.id, **period),
        }
        return Response(VendorClaimStatsSerializer(data).data)


# =============================================================================
# Admin: claim-code analytics
# =============================================================================

@extend_schema(
    parameters=[ClaimReportFilterSerializer],
    responses={200: ClaimAnalyticsSerializer},
    description="Claims issued, verified and used, overall and per vendor and deal.",
    tags=['claims'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def claim_analytics(request):
    """Claim-code analytics for administrators."""
    filter_serializer = ClaimReportFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    period = {'start_date': params.get('start_date'), 'end_date': params.get('end_date')}
    vendor_id = params.get('vendor')
    data = {
        'summary': ClaimReports.summary(vendor_id=vendor_id, **period),
        'vendors': ClaimReports.vendor_breakdown(**period),
        'deals': ClaimReports.deal_breakdown(vendor_id=vendor_id, **period),
    }
    return Response(ClaimAnalyticsSerializer(data).data)
