"""
Claim Reports
=============

Read-only aggregates over claims for the admin claim-code dashboard and the
vendor's claimed-deals page.

Example:
    Verification funnel for one vendor::

        from apps.claims.services.reporting import ClaimReports

        summary = ClaimReports.summary(vendor_id=vendor.id)
        print(f"{summary['verified_claims']} of {summary['total_claims']} verified")

Note:
    Stored status never becomes ``expired``. A claim that is not used and
    is past ``expires_at`` counts as expired, whatever its stored status.
    ``verified_claims`` includes used claims, since every used claim was
    verified first. Date filters apply to ``issued_at``.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum, Count, Q, Value, DecimalField
from django.db.models.functions import Coalesce
from django.utils import timezone

from ..models import Claim, ClaimStatus

ZERO = Decimal('0.00')
CENTS = Decimal('0.01')

VERIFIED_OR_USED = Q(status__in=[ClaimStatus.VERIFIED, ClaimStatus.USED])
USED = Q(status=ClaimStatus.USED)


def _expired(now):
    return ~USED & Q(expires_at__lte=now)


def _percentage(part, whole):
    if not whole:
        return ZERO
    return (Decimal(part) * 100 / whole).quantize(CENTS, rounding=ROUND_HALF_UP)


def _funnel(now):
    """Aggregate expressions shared by every claim report."""
    return {
        'total_claims': Count('id'),
        'verified_claims': Count('id', filter=VERIFIED_OR_USED),
        'used_claims': Count('id', filter=USED),
        'expired_claims': Count('id', filter=_expired(now)),
        'total_savings': Coalesce(
            Sum('actual_savings', filter=USED),
            Value(ZERO),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        ),
    }


def _with_rates(row):
    row['verification_rate'] = _percentage(row['verified_claims'], row['total_claims'])
    row['redemption_rate'] = _percentage(row['used_claims'], row['verified_claims'])
    return row


class ClaimReports:
    """
    Aggregate queries over Claim.

    All methods are static and return plain dicts/lists ready for
    serialization.
    """

    @staticmethod
    def filtered_claims(start_date=None, end_date=None, vendor_id=None, deal_id=None):
        """Base queryset shared by every report."""
        queryset = Claim.objects.all()
        if start_date:
            queryset = queryset.filter(issued_at__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(issued_at__date__lte=end_date)
        if vendor_id:
            queryset = queryset.filter(deal__vendor_id=vendor_id)
        if deal_id:
            queryset = queryset.filter(deal_id=deal_id)
        return queryset

    @staticmethod
    def with_effective_status(queryset, effective_status, now=None):
        """Filter claims by their status with expiry applied."""
        now = now or timezone.now()
        if effective_status == ClaimStatus.EXPIRED:
            return queryset.filter(_expired(now))
        if effective_status == ClaimStatus.USED:
            return queryset.filter(USED)
        return queryset.filter(status=effective_status, expires_at__gt=now)

    @staticmethod
    def summary(start_date=None, end_date=None, vendor_id=None, now=None):
        """
        Claim funnel totals.

        Args:
            start_date (date, optional): First issue day included.
            end_date (date, optional): Last issue day included.
            vendor_id (UUID, optional): Restrict to one vendor's deals.
            now (datetime, optional): Reference time for expiry.

        Returns:
            dict: A dictionary containing:
                - total_claims (int): Claims issued.
                - verified_claims (int): Claims verified at a till (used included).
                - used_claims (int): Claims consumed by a transaction.
                - expired_claims (int): Unused claims past their expiry.
                - total_savings (Decimal): Savings booked on used claims.
                - average_savings (Decimal): Savings per used claim.
                - verification_rate (Decimal): Verified per issued, in percent.
                - redemption_rate (Decimal): Used per verified, in percent.
        """
        now = now or timezone.now()
        claims = ClaimReports.filtered_claims(start_date, end_date, vendor_id)

        totals = _with_rates(claims.aggregate(**_funnel(now)))
        totals['average_savings'] = (
            (totals['total_savings'] / totals['used_claims']).quantize(CENTS, rounding=ROUND_HALF_UP)
            if totals['used_claims'] else ZERO
        )
        totals['period_start'] = start_date
        totals['period_end'] = end_date
        return totals

    @staticmethod
    def vendor_breakdown(start_date=None, end_date=None, now=None):
        """
        Claim funnel per vendor.

        Returns:
            list[dict]: One row per vendor with claims, busiest first.
        """
        now = now or timezone.now()
        rows = (
            ClaimReports.filtered_claims(start_date, end_date)
            .values('deal__vendor_id', 'deal__vendor__business_name')
            .annotate(**_funnel(now))
            .order_by('-total_claims', 'deal__vendor__business_name')
        )

        return [
            _with_rates({
                'vendor_id': row['deal__vendor_id'],
                'business_name': row['deal__vendor__business_name'],
                'total_claims': row['total_claims'],
                'verified_claims': row['verified_claims'],
                'used_claims': row['used_claims'],
                'expired_claims': row['expired_claims'],
                'total_savings': row['total_savings'],
            })
            for row in rows
        ]

    @staticmethod
    def deal_breakdown(vendor_id=None, start_date=None, end_date=None, now=None):
        """
        Claim funnel per deal.

        Args:
            vendor_id (UUID, optional): Restrict to one vendor's deals.

        Returns:
            list[dict]: One row per deal with claims, busiest first.
        """
        now = now or timezone.now()
        rows = (
            ClaimReports.filtered_claims(start_date, end_date, vendor_id)
            .values('deal_id', 'deal__title', 'deal__vendor__business_name')
            .annotate(**_funnel(now))
            .order_by('-total_claims', 'deal__title')
        )

        return [
            _with_rates({
                'deal_id': row['deal_id'],
                'title': row['deal__title'],
                'business_name': row['deal__vendor__business_name'],
                'total_claims': row['total_claims'],
                'verified_claims': row['verified_claims'],
                'used_claims': row['used_claims'],
                'expired_claims': row['expired_claims'],
                'total_savings': row['total_savings'],
            })
            for row in rows
        ]
