"""
Commission ledger: affiliate clicks and confirmed conversions.

Every event starts life as a ``pending`` click carrying an estimated
commission. An admin later confirms the real sale, which turns the same
row into a ``confirmed`` conversion billed at the conversion rate.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.deals.models import Deal
from apps.deals.services import DealNotFoundError, DealInactiveError, DealExpiredError

from ..models import CommissionEvent, EventStatus, EventType
from .exceptions import (
    EventNotFoundError,
    EventNotPendingError,
    InvalidSaleAmountError,
    DealNotMonetizedError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def commission_for(amount: Decimal, rate: Decimal) -> Decimal:
    """Percentage of an amount, rounded half-up to cents."""
    return (amount * rate / Decimal('100')).quantize(CENTS, rounding=ROUND_HALF_UP)


def click_rate_for(vendor) -> Decimal:
    if vendor.click_commission_rate is not None:
        return vendor.click_commission_rate
    return settings.COMMISSION_DEFAULT_CLICK_RATE


def conversion_rate_for(vendor) -> Decimal:
    if vendor.conversion_commission_rate is not None:
        return vendor.conversion_commission_rate
    return settings.COMMISSION_DEFAULT_CONVERSION_RATE


def get_event(*, event_id: UUID) -> CommissionEvent:
    try:
        return CommissionEvent.objects.select_related('vendor').get(id=event_id)
    except CommissionEvent.DoesNotExist:
        raise EventNotFoundError(f"Commission event {event_id} not found")


def record_click(*, vendor_id: UUID, deal_id: UUID, claim=None) -> CommissionEvent:
    """
    Record an affiliate click as a pending commission event.

    Only live, monetized online deals (affiliate link plus a vendor with
    commission enabled) produce clicks. The commission on a click is an
    estimate based on the deal's price; nothing is billed until the
    conversion is confirmed.

    Args:
        vendor_id: UUID of the vendor owning the deal
        deal_id: UUID of the deal clicked
        claim: Claim that produced the click, if any

    Returns:
        Created CommissionEvent

    Raises:
        DealNotFoundError: If the deal doesn't exist for this vendor
        DealInactiveError: Deal is deactivated or unapproved
        DealExpiredError: Deal is past valid_until
        DealNotMonetizedError: In-store deal, no affiliate link, or vendor
            without affiliate commission
    """
    deal = Deal.objects.select_related('vendor').filter(id=deal_id, vendor_id=vendor_id).first()
    if deal is None:
        raise DealNotFoundError(f"Deal {deal_id} not found for vendor {vendor_id}")
    if not (deal.is_active and deal.is_approved):
        raise DealInactiveError(f"Deal {deal.id} is not active")
    if deal.is_expired():
        raise DealExpiredError(f"Deal {deal.id} expired at {deal.valid_until.isoformat()}")
    if not deal.is_monetized:
        raise DealNotMonetizedError(f"Deal {deal.id} does not earn affiliate commission")

    rate = click_rate_for(deal.vendor)
    order_value = (
        deal.discounted_price
        or deal.original_price
        or settings.COMMISSION_DEFAULT_ORDER_VALUE
    )

    event = CommissionEvent.objects.create(
        vendor=deal.vendor,
        deal=deal,
        claim=claim,
        event_type=EventType.CLICK,
        commission_rate=rate,
        estimated_order_value=order_value,
        commission_amount=commission_for(order_value, rate),
    )

    logger.info(
        "Click recorded for deal %s (vendor %s): estimated commission %s",
        deal.id, deal.vendor_id, event.commission_amount,
    )
    return event


def confirm_conversion(
    *,
    event_id: UUID,
    sale_amount: Decimal,
    confirmed_by: Optional[User] = None
) -> CommissionEvent:
    """
    Confirm that a click converted into a sale.

    Args:
        event_id: UUID of the pending event
        sale_amount: Actual sale value reported by the merchant
        confirmed_by: Admin confirming the conversion

    Returns:
        The updated CommissionEvent

    Raises:
        InvalidSaleAmountError: Sale amount missing or not positive
        EventNotFoundError: Event doesn't exist
        EventNotPendingError: Event was already confirmed or paid
    """
    try:
        sale = None if sale_amount is None else Decimal(str(sale_amount))
    except InvalidOperation:
        sale = None
    if sale is None or sale <= 0:
        raise InvalidSaleAmountError("Sale amount must be greater than zero")
    sale = sale.quantize(CENTS, rounding=ROUND_HALF_UP)

    event = get_event(event_id=event_id)
    if event.status != EventStatus.PENDING:
        raise EventNotPendingError(f"Commission event {event_id} is {event.status}")

    rate = conversion_rate_for(event.vendor)
    now = timezone.now()

    updated = CommissionEvent.objects.filter(id=event.id, status=EventStatus.PENDING).update(
        event_type=EventType.CONVERSION,
        commission_rate=rate,
        sale_amount=sale,
        commission_amount=commission_for(sale, rate),
        status=EventStatus.CONFIRMED,
        confirmed_at=now,
        confirmed_by=confirmed_by,
    )
    if not updated:
        logger.warning("Lost confirmation race for commission event %s", event.id)
        raise EventNotPendingError(f"Commission event {event_id} is no longer pending")

    event.refresh_from_db()
    logger.info(
        "Conversion confirmed for event %s: sale %s, commission %s",
        event.id, sale, event.commission_amount,
    )
    return event
