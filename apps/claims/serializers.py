from rest_framework import serializers
from apps.accounts.serializers import UserPublicSerializer
from apps.deals.models import Deal
from apps.deals.serializers import DealSerializer
from .models import Claim, ClaimStatus, PosSession, Transaction
from .services import build_qr_payload


class DealSnapshotSerializer(serializers.ModelSerializer):
    """Deal context shown to the vendor at the till."""

    class Meta:
        model = Deal
        fields = [
            'id',
            'title',
            'kind',
            'discount_percentage',
            'original_price',
            'discounted_price',
        ]
        read_only_fields = fields


class ClaimSerializer(serializers.ModelSerializer):
    """Customer's view of one of their claims."""

    deal = DealSerializer(read_only=True)
    effective_status = serializers.CharField(read_only=True)
    qr_payload = serializers.SerializerMethodField()

    class Meta:
        model = Claim
        fields = [
            'id',
            'claim_code',
            'deal',
            'status',
            'effective_status',
            'issued_at',
            'expires_at',
            'verified_at',
            'verification_method',
            'used_at',
            'bill_amount',
            'actual_savings',
            'qr_payload',
        ]
        read_only_fields = fields

    def get_qr_payload(self, obj):
        if obj.effective_status != ClaimStatus.CLAIMED:
            return None
        return build_qr_payload(obj)


class ClaimIssuanceSerializer(serializers.Serializer):
    """Response body for a freshly issued claim."""

    claim_id = serializers.UUIDField(source='claim.id')
    claim_code = serializers.CharField()
    deal_id = serializers.UUIDField(source='claim.deal_id')
    deal_kind = serializers.CharField()
    issued_at = serializers.DateTimeField(source='claim.issued_at')
    expires_at = serializers.DateTimeField()
    affiliate_link = serializers.URLField(allow_null=True)
    click_event_id = serializers.UUIDField(allow_null=True)
    qr_payload = serializers.DictField()


class ClaimVerificationSerializer(serializers.ModelSerializer):
    """Customer and deal snapshot returned to the vendor after verification."""

    claim_id = serializers.UUIDField(source='id', read_only=True)
    customer = UserPublicSerializer(read_only=True)
    deal = DealSnapshotSerializer(read_only=True)

    class Meta:
        model = Claim
        fields = [
            'claim_id',
            'claim_code',
            'status',
            'verified_at',
            'verification_method',
            'expires_at',
            'customer',
            'deal',
        ]
        read_only_fields = fields


class VendorClaimSerializer(serializers.ModelSerializer):
    """Vendor's view of a claim on one of their deals."""

    customer = UserPublicSerializer(read_only=True)
    deal = DealSnapshotSerializer(read_only=True)
    effective_status = serializers.CharField(read_only=True)
    can_be_verified = serializers.SerializerMethodField()

    class Meta:
        model = Claim
        fields = [
            'id',
            'claim_code',
            'status',
            'effective_status',
            'can_be_verified',
            'issued_at',
            'expires_at',
            'verified_at',
            'verification_method',
            'used_at',
            'bill_amount',
            'actual_savings',
            'customer',
            'deal',
        ]
        read_only_fields = fields

    def get_can_be_verified(self, obj):
        return obj.effective_status == ClaimStatus.CLAIMED


class PosSessionSerializer(serializers.ModelSerializer):

    class Meta:
        model = PosSession
        fields = [
            'id',
            'terminal_id',
            'session_token',
            'is_active',
            'started_at',
            'ended_at',
            'total_transactions',
            'total_amount',
            'total_savings',
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    """Receipt view of a completed sale."""

    claim_id = serializers.UUIDField(read_only=True)
    claim_code = serializers.CharField(source='claim.claim_code', read_only=True)
    deal = DealSnapshotSerializer(read_only=True)
    customer = UserPublicSerializer(read_only=True)
    final_amount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    verification_method = serializers.CharField(source='claim.verification_method', read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'receipt_number',
            'claim_id',
            'claim_code',
            'verification_method',
            'deal',
            'customer',
            'session',
            'bill_amount',
            'savings_amount',
            'final_amount',
            'payment_method',
            'notes',
            'processed_at',
        ]
        read_only_fields = fields


class MembershipTokenSerializer(serializers.Serializer):
    token = serializers.CharField()
    payload = serializers.DictField()
    issued_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()
    qr_image = serializers.CharField(required=False, allow_null=True)


class MembershipIdentitySerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    name = serializers.CharField()
    membership_plan = serializers.CharField()
    total_savings = serializers.DecimalField(max_digits=12, decimal_places=2)
    deals_claimed = serializers.IntegerField()
    issued_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()


class PinVerificationSerializer(serializers.Serializer):
    deal = DealSnapshotSerializer()
    valid = serializers.BooleanField(default=True)


class ClaimFunnelSerializer(serializers.Serializer):
    total_claims = serializers.IntegerField()
    verified_claims = serializers.IntegerField()
    used_claims = serializers.IntegerField()
    expired_claims = serializers.IntegerField()
    total_savings = serializers.DecimalField(max_digits=14, decimal_places=2)
    verification_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
    redemption_rate = serializers.DecimalField(max_digits=6, decimal_places=2)


class ClaimSummarySerializer(ClaimFunnelSerializer):
    average_savings = serializers.DecimalField(max_digits=14, decimal_places=2)
    period_start = serializers.DateField(allow_null=True)
    period_end = serializers.DateField(allow_null=True)


class VendorClaimFunnelSerializer(ClaimFunnelSerializer):
    vendor_id = serializers.UUIDField()
    business_name = serializers.CharField()


class DealClaimFunnelSerializer(ClaimFunnelSerializer):
    deal_id = serializers.UUIDField()
    title = serializers.CharField()
    business_name = serializers.CharField()


class ClaimAnalyticsSerializer(serializers.Serializer):
    """Admin claim-code dashboard."""

    summary = ClaimSummarySerializer()
    vendors = VendorClaimFunnelSerializer(many=True)
    deals = DealClaimFunnelSerializer(many=True)


class VendorClaimStatsSerializer(serializers.Serializer):
    summary = ClaimSummarySerializer()
    deals = DealClaimFunnelSerializer(many=True)


# =============================================================================
# Input Serializers
# =============================================================================

class ClaimFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the customer's claim list.

    Query Parameters:
        status (str): Stored status (claimed, verified, used)
        active (bool): Only claims that can still be redeemed
    """

    status = serializers.ChoiceField(
        choices=[ClaimStatus.CLAIMED, ClaimStatus.VERIFIED, ClaimStatus.USED],
        required=False
    )
    active = serializers.BooleanField(required=False, default=False)


class MembershipTokenQuerySerializer(serializers.Serializer):
    qr = serializers.BooleanField(required=False, default=False)


class VerifyClaimCodeInputSerializer(serializers.Serializer):
    claim_code = serializers.CharField(max_length=32, trim_whitespace=True)


class VerifyQRInputSerializer(serializers.Serializer):
    """The scanned QR payload, either as the raw string or already parsed."""

    qr_data = serializers.JSONField()


class VerifyTokenInputSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=4096)


class VerifyPinInputSerializer(serializers.Serializer):
    pin = serializers.CharField(max_length=16, trim_whitespace=True)


class CompleteTransactionInputSerializer(serializers.Serializer):
    """
    Validate a POS checkout request.

    Amount and payment method rules live in the service so that every
    caller gets the same error codes.
    """

    claim_id = serializers.UUIDField()
    bill_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    payment_method = serializers.CharField(max_length=20)
    session_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PinTransactionInputSerializer(serializers.Serializer):
    pin = serializers.CharField(max_length=16)
    customer_id = serializers.UUIDField()
    bill_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    payment_method = serializers.CharField(max_length=20)
    session_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the vendor's transaction list.

    Query Parameters:
        session (UUID): Only sales booked on this POS session
        date_from (date): Processed on or after this date
        date_to (date): Processed on or before this date
    """

    session = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })

        return attrs


class OpenSessionInputSerializer(serializers.Serializer):
    terminal_id = serializers.CharField(max_length=64)


class VendorClaimFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the vendor's claim list.

    Query Parameters:
        effective_status (str): claimed, verified, used or expired
        deal (UUID): Only claims on this deal
    """

    effective_status = serializers.ChoiceField(choices=ClaimStatus.choices, required=False)
    deal = serializers.UUIDField(required=False)


class ClaimReportFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for claim reports.

    Query Parameters:
        start_date (date): First issue day included
        end_date (date): Last issue day included
        vendor (UUID): Restrict the summary and deal rows to one vendor
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    vendor = serializers.UUIDField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        return attrs
