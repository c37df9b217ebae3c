from rest_framework import serializers
from .models import BatchStatus, CommissionEvent, EventStatus, EventType, PayoutBatch


class CommissionEventSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.business_name', read_only=True)
    deal_title = serializers.CharField(source='deal.title', read_only=True)

    class Meta:
        model = CommissionEvent
        fields = [
            'id',
            'vendor',
            'vendor_name',
            'deal',
            'deal_title',
            'claim',
            'event_type',
            'occurred_at',
            'commission_rate',
            'estimated_order_value',
            'sale_amount',
            'commission_amount',
            'status',
            'confirmed_at',
            'confirmed_by',
            'paid_at',
            'payout_batch',
        ]
        read_only_fields = fields


class PayoutBatchSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.business_name', read_only=True)
    event_ids = serializers.PrimaryKeyRelatedField(source='events', many=True, read_only=True)

    class Meta:
        model = PayoutBatch
        fields = [
            'id',
            'vendor',
            'vendor_name',
            'period_start',
            'period_end',
            'event_count',
            'event_ids',
            'total_commission',
            'status',
            'payment_method',
            'transaction_reference',
            'notes',
            'created_by',
            'created_at',
            'paid_at',
        ]
        read_only_fields = fields


class PayoutBatchDetailSerializer(PayoutBatchSerializer):
    events = CommissionEventSerializer(many=True, read_only=True)

    class Meta(PayoutBatchSerializer.Meta):
        fields = PayoutBatchSerializer.Meta.fields + ['events']
        read_only_fields = fields


class CommissionOverviewSerializer(serializers.Serializer):
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    estimated_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_clicks = serializers.IntegerField()
    total_conversions = serializers.IntegerField()
    active_vendors = serializers.IntegerField()
    average_commission_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    period_start = serializers.DateField(allow_null=True)
    period_end = serializers.DateField(allow_null=True)


class VendorPerformanceSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    business_name = serializers.CharField()
    clicks = serializers.IntegerField()
    conversions = serializers.IntegerField()
    conversion_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
    estimated_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    confirmed_commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_commission = serializers.DecimalField(max_digits=14, decimal_places=2)


# =============================================================================
# Input Serializers
# =============================================================================

class RecordClickInputSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    deal_id = serializers.UUIDField()


class ConfirmConversionInputSerializer(serializers.Serializer):
    """Sale amount positivity is checked by the service (invalid_sale_amount)."""

    sale_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True, required=False)


class ReportFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for commission reports.

    Query Parameters:
        start_date (date): First day included
        end_date (date): Last day included
        status (str): Event status
        vendor (UUID): Restrict to one vendor (performance only)
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=EventStatus.choices, required=False)
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


class EventFilterSerializer(ReportFilterSerializer):
    event_type = serializers.ChoiceField(choices=EventType.choices, required=False)
    unbatched = serializers.BooleanField(required=False, default=False)


class CreatePayoutBatchInputSerializer(serializers.Serializer):
    """Period ordering is checked by the service (invalid_period)."""

    vendor_id = serializers.UUIDField()
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class MarkBatchPaidInputSerializer(serializers.Serializer):
    payment_method = serializers.CharField(max_length=50)
    transaction_reference = serializers.CharField(max_length=128, allow_blank=True)


class PayoutBatchFilterSerializer(serializers.Serializer):
    vendor = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=BatchStatus.choices, required=False)
