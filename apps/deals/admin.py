from django.contrib import admin
from django.utils.html import format_html
from .models import Vendor, Deal


def _badge(color, label, text_color='white'):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        color, text_color, label,
    )


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    """Admin for vendor profiles. Approval and commission terms are set here."""

    list_display = [
        'business_name',
        'user',
        'city',
        'approved_badge',
        'commission_enabled',
        'click_commission_rate',
        'conversion_commission_rate',
        'total_redemptions',
    ]
    list_filter = ['is_approved', 'commission_enabled', 'city']
    search_fields = ['business_name', 'user__email', 'city']
    readonly_fields = ['total_redemptions', 'created_at']
    raw_id_fields = ['user']

    fieldsets = (
        ('Business', {
            'fields': ('user', 'business_name', 'city', 'is_approved')
        }),
        ('Commission', {
            'fields': ('commission_enabled', 'click_commission_rate', 'conversion_commission_rate'),
        }),
        ('Stats', {
            'fields': ('total_redemptions', 'created_at'),
            'classes': ('collapse',),
        }),
    )

    def approved_badge(self, obj):
        if obj.is_approved:
            return _badge('#6B8E5E', 'Approved')
        return _badge('#E5C49A', 'Pending', '#2C1810')
    approved_badge.short_description = 'Approval'
    approved_badge.admin_order_field = 'is_approved'

    actions = ['approve_vendors']

    @admin.action(description='Approve selected vendors')
    def approve_vendors(self, request, queryset):
        count = queryset.update(is_approved=True)
        self.message_user(request, f'Approved {count} vendor(s).')


@admin.register(Deal)
class DealAdmin(admin.ModelAdmin):
    """Admin for deals. Redemption counters are read-only."""

    list_display = [
        'title',
        'vendor',
        'kind',
        'discount_percentage',
        'status_badge',
        'redemptions_display',
        'valid_until',
    ]
    list_filter = ['kind', 'is_active', 'is_approved', 'valid_until']
    search_fields = ['title', 'vendor__business_name', 'verification_code']
    readonly_fields = ['current_redemptions', 'created_at', 'updated_at']
    raw_id_fields = ['vendor']
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        if not obj.is_approved:
            return _badge('#E5C49A', 'Unapproved', '#2C1810')
        if not obj.is_available():
            return _badge('#B85C5C', 'Unavailable')
        return _badge('#6B8E5E', 'Live')
    status_badge.short_description = 'Status'

    def redemptions_display(self, obj):
        if obj.max_redemptions is None:
            return f'{obj.current_redemptions} / unlimited'
        return f'{obj.current_redemptions} / {obj.max_redemptions}'
    redemptions_display.short_description = 'Redemptions'

    actions = ['approve_deals', 'deactivate_deals']

    @admin.action(description='Approve selected deals')
    def approve_deals(self, request, queryset):
        count = queryset.update(is_approved=True)
        self.message_user(request, f'Approved {count} deal(s).')

    @admin.action(description='Deactivate selected deals')
    def deactivate_deals(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f'Deactivated {count} deal(s).')
