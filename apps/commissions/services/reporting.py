"""
Commission Reports
==================

Read-only aggregates over the commission ledger for the admin dashboard
and vendor performance pages.

Example:
    Revenue for January::

        from apps.commissions.services.reporting import CommissionReports

        overview = CommissionReports.overview(
            start_date=date(2026, 1, 1),
            end_date=date(2026, 1, 31),
        )
        print(f"Confirmed revenue: {overview['total_revenue']}")

Note:
    Every event in the ledger started as a click, so the click count is
    the number of events regardless of type. Date filters apply to
    ``occurred_at``.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum, Count, Avg, Q, Value, DecimalField
from django.db.models.functions import Coalesce

from apps.deals.models import DealKind, Vendor

from ..models import CommissionEvent, EventStatus, EventType

ZERO = Decimal('0.00')
CENTS = Decimal('0.01')

SETTLED = Q(status__in=[EventStatus.CONFIRMED, EventStatus.PAID])


def _money_sum(condition=None):
    return Coalesce(
        Sum('commission_amount', filter=condition),
        Value(ZERO),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


class CommissionReports:
    """
    Aggregate queries over CommissionEvent.

    All methods are static and return plain dicts/lists ready for
    serialization.
    """

    @staticmethod
    def filtered_events(start_date=None, end_date=None, status=None, vendor_id=None):
        """Base queryset shared by every report."""
        queryset = CommissionEvent.objects.all()
        if start_date:
            queryset = queryset.filter(occurred_at__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(occurred_at__date__lte=end_date)
        if status:
            queryset = queryset.filter(status=status)
        if vendor_id:
            queryset = queryset.filter(vendor_id=vendor_id)
        return queryset

    @staticmethod
    def overview(start_date=None, end_date=None, status=None):
        """
        Platform-wide commission totals.

        Args:
            start_date (date, optional): First day included.
            end_date (date, optional): Last day included.
            status (str, optional): Restrict to one event status.

        Returns:
            dict: A dictionary containing:
                - total_revenue (Decimal): Confirmed and paid commission.
                - estimated_revenue (Decimal): Commission still pending.
                - total_clicks (int): Number of events.
                - total_conversions (int): Events confirmed as conversions.
                - active_vendors (int): Vendors with at least one online deal.
                - average_commission_rate (Decimal): Mean rate in percent.
        """
        events = CommissionReports.filtered_events(start_date, end_date, status)

        totals = events.aggregate(
            total_revenue=_money_sum(SETTLED),
            estimated_revenue=_money_sum(Q(status=EventStatus.PENDING)),
            total_clicks=Count('id'),
            total_conversions=Count('id', filter=Q(event_type=EventType.CONVERSION)),
            average_commission_rate=Avg('commission_rate'),
        )

        average_rate = totals['average_commission_rate']
        totals['average_commission_rate'] = (
            Decimal(average_rate).quantize(CENTS, rounding=ROUND_HALF_UP)
            if average_rate is not None else ZERO
        )
        totals['active_vendors'] = (
            Vendor.objects
            .filter(deals__kind=DealKind.ONLINE)
            .distinct()
            .count()
        )
        totals['period_start'] = start_date
        totals['period_end'] = end_date
        return totals

    @staticmethod
    def vendor_performance(vendor_id=None, start_date=None, end_date=None, status=None):
        """
        Per-vendor click and conversion statistics.

        Args:
            vendor_id (UUID, optional): Restrict to one vendor.
            start_date (date, optional): First day included.
            end_date (date, optional): Last day included.
            status (str, optional): Restrict to one event status.

        Returns:
            list[dict]: One row per vendor, highest confirmed commission first.
        """
        events = CommissionReports.filtered_events(start_date, end_date, status, vendor_id)

        rows = (
            events
            .values('vendor_id', 'vendor__business_name')
            .annotate(
                clicks=Count('id'),
                conversions=Count('id', filter=Q(event_type=EventType.CONVERSION)),
                estimated_commission=_money_sum(Q(status=EventStatus.PENDING)),
                confirmed_commission=_money_sum(SETTLED),
                paid_commission=_money_sum(Q(status=EventStatus.PAID)),
            )
            .order_by('-confirmed_commission', 'vendor__business_name')
        )

        results = []
        for row in rows:
            clicks = row['clicks']
            conversion_rate = (
                (Decimal(row['conversions']) * 100 / clicks).quantize(CENTS, rounding=ROUND_HALF_UP)
                if clicks else ZERO
            )
            results.append({
                'vendor_id': row['vendor_id'],
                'business_name': row['vendor__business_name'],
                'clicks': clicks,
                'conversions': row['conversions'],
                'conversion_rate': conversion_rate,
                'estimated_commission': row['estimated_commission'],
                'confirmed_commission': row['confirmed_commission'],
                'paid_commission': row['paid_commission'],
            })
        return results
