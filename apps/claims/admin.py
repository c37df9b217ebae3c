from django.contrib import admin
from django.utils.html import format_html
from .models import Claim, ClaimStatus, PosSession, Transaction


STATUS_COLORS = {
    ClaimStatus.CLAIMED: ('#E5C49A', '#2C1810'),
    ClaimStatus.VERIFIED: ('#A47449', 'white'),
    ClaimStatus.USED: ('#6B8E5E', 'white'),
    ClaimStatus.EXPIRED: ('#B85C5C', 'white'),
}


@admin.register(Claim)
class ClaimAdmin(admin.ModelAdmin):
    """
    Read-only view of claims.

    Status changes only happen through verification and checkout, so
    nothing here is editable.
    """

    list_display = [
        'masked_code',
        'deal',
        'customer',
        'status_badge',
        'verification_method',
        'issued_at',
        'expires_at',
        'actual_savings',
    ]
    list_filter = ['status', 'verification_method', 'issued_at']
    search_fields = ['claim_code', 'customer__email', 'deal__title']
    date_hierarchy = 'issued_at'
    raw_id_fields = ['deal', 'customer', 'verified_by']
    readonly_fields = [
        'claim_code',
        'status',
        'issued_at',
        'expires_at',
        'verified_at',
        'verified_by',
        'verification_method',
        'used_at',
        'bill_amount',
        'actual_savings',
    ]

    def status_badge(self, obj):
        """Display effective status (expiry applied) as colored badge."""
        effective = obj.effective_status
        background, color = STATUS_COLORS.get(effective, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            background, color, ClaimStatus(effective).label,
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = [
        'receipt_number',
        'vendor',
        'deal',
        'customer',
        'bill_amount',
        'savings_amount',
        'payment_method',
        'processed_at',
    ]
    list_filter = ['payment_method', 'processed_at']
    search_fields = ['receipt_number', 'customer__email', 'vendor__business_name']
    date_hierarchy = 'processed_at'
    raw_id_fields = ['claim', 'vendor', 'deal', 'customer', 'session']
    readonly_fields = [
        'receipt_number',
        'bill_amount',
        'savings_amount',
        'payment_method',
        'processed_at',
    ]

    def has_add_permission(self, request):
        return False


@admin.register(PosSession)
class PosSessionAdmin(admin.ModelAdmin):
    list_display = [
        'terminal_id',
        'vendor',
        'active_badge',
        'started_at',
        'ended_at',
        'total_transactions',
        'total_amount',
        'total_savings',
    ]
    list_filter = ['is_active', 'started_at']
    search_fields = ['terminal_id', 'vendor__business_name']
    readonly_fields = [
        'session_token',
        'started_at',
        'ended_at',
        'total_transactions',
        'total_amount',
        'total_savings',
    ]

    def active_badge(self, obj):
        if obj.is_active:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Open</span>'
            )
        return format_html(
            '<span style="background: #ccc; color: #666; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Closed</span>'
        )
    active_badge.short_description = 'Session'
    active_badge.admin_order_field = 'is_active'
