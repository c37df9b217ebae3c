from rest_framework import serializers
from .models import Deal, DealKind, Vendor


class VendorSerializer(serializers.ModelSerializer):
    """Public vendor info."""

    class Meta:
        model = Vendor
        fields = ['id', 'business_name', 'city']
        read_only_fields = fields


class DealSerializer(serializers.ModelSerializer):
    """Customer-facing deal representation. Never exposes the PIN."""

    vendor = VendorSerializer(read_only=True)
    remaining_redemptions = serializers.SerializerMethodField()

    class Meta:
        model = Deal
        fields = [
            'id',
            'vendor',
            'title',
            'description',
            'kind',
            'discount_percentage',
            'original_price',
            'discounted_price',
            'max_redemptions',
            'current_redemptions',
            'remaining_redemptions',
            'valid_until',
            'created_at',
        ]
        read_only_fields = fields

    def get_remaining_redemptions(self, obj):
        if obj.max_redemptions is None:
            return None
        return max(obj.max_redemptions - obj.current_redemptions, 0)


class VendorDealSerializer(DealSerializer):
    """Deal representation for the owning vendor, including PIN and link."""

    class Meta(DealSerializer.Meta):
        fields = DealSerializer.Meta.fields + [
            'verification_code',
            'affiliate_link',
            'is_active',
            'is_approved',
        ]
        read_only_fields = fields


# =============================================================================
# Input Serializers
# =============================================================================

class DealCreateSerializer(serializers.Serializer):
    """
    Validate deal creation payload.

    Kind-specific rules (PIN vs affiliate link) are enforced by the service
    so that API and admin-side callers share them.
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    kind = serializers.ChoiceField(choices=DealKind.choices)
    discount_percentage = serializers.IntegerField(min_value=1, max_value=100)
    original_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    discounted_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    verification_code = serializers.CharField(
        max_length=6, required=False, allow_blank=True, allow_null=True
    )
    affiliate_link = serializers.URLField(max_length=500, required=False, allow_blank=True, default='')
    max_redemptions = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    valid_until = serializers.DateTimeField()


class DealFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for deal listing.

    Query Parameters:
        kind (str): Filter by deal kind
        is_active (bool): Filter by active flag (vendor listings only)
    """

    kind = serializers.ChoiceField(choices=DealKind.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
