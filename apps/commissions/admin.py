from django.contrib import admin
from django.utils.html import format_html
from .models import CommissionEvent, EventStatus, PayoutBatch, BatchStatus


EVENT_STATUS_COLORS = {
    EventStatus.PENDING: ('#E5C49A', '#2C1810'),
    EventStatus.CONFIRMED: ('#A47449', 'white'),
    EventStatus.PAID: ('#6B8E5E', 'white'),
}


@admin.register(CommissionEvent)
class CommissionEventAdmin(admin.ModelAdmin):
    """
    Ledger browser. Confirmation and settlement go through the API so the
    conditional status updates are always applied.
    """

    list_display = [
        'occurred_at',
        'vendor',
        'deal',
        'event_type',
        'commission_rate',
        'commission_amount',
        'status_badge',
        'payout_batch',
    ]
    list_filter = ['event_type', 'status', 'occurred_at']
    search_fields = ['vendor__business_name', 'deal__title']
    date_hierarchy = 'occurred_at'
    raw_id_fields = ['vendor', 'deal', 'claim', 'confirmed_by', 'payout_batch']
    readonly_fields = [
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

    def status_badge(self, obj):
        background, color = EVENT_STATUS_COLORS.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            background, color, obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


class CommissionEventInline(admin.TabularInline):
    model = CommissionEvent
    fields = ['occurred_at', 'deal', 'event_type', 'sale_amount', 'commission_amount', 'status']
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PayoutBatch)
class PayoutBatchAdmin(admin.ModelAdmin):
    list_display = [
        'vendor',
        'period_start',
        'period_end',
        'event_count',
        'total_commission',
        'status_badge',
        'transaction_reference',
        'created_at',
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['vendor__business_name', 'transaction_reference']
    raw_id_fields = ['vendor', 'created_by', 'paid_by']
    readonly_fields = [
        'event_count',
        'total_commission',
        'status',
        'payment_method',
        'transaction_reference',
        'created_by',
        'created_at',
        'paid_at',
        'paid_by',
    ]
    inlines = [CommissionEventInline]

    def status_badge(self, obj):
        if obj.status == BatchStatus.PAID:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Paid</span>'
            )
        return format_html(
            '<span style="background: #E5C49A; color: #2C1810; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Pending</span>'
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        return False
