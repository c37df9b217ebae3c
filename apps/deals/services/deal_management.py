"""Deal catalogue operations and the redemption counter."""

import logging
import re
import secrets
import string
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import F, Q
from django.utils import timezone

from ..models import Deal, DealKind, Vendor, PIN_PATTERN
from .exceptions import (
    DealNotFoundError,
    DealInactiveError,
    DealExpiredError,
    RedemptionCapReachedError,
    InvalidDealError,
    VendorNotFoundError,
)

logger = logging.getLogger(__name__)

PIN_ALPHABET = string.ascii_uppercase + string.digits
PIN_LENGTH = 6
PIN_MAX_ATTEMPTS = 20


def get_vendor(*, vendor_id: UUID) -> Vendor:
    try:
        return Vendor.objects.get(id=vendor_id)
    except Vendor.DoesNotExist:
        raise VendorNotFoundError(f"Vendor {vendor_id} not found")


def get_deal(*, deal_id: UUID, vendor: Optional[Vendor] = None) -> Deal:
    """
    Fetch a deal, optionally scoped to one vendor.

    Raises:
        DealNotFoundError: If no matching deal exists
    """
    queryset = Deal.objects.select_related('vendor')
    if vendor is not None:
        queryset = queryset.filter(vendor=vendor)
    try:
        return queryset.get(id=deal_id)
    except Deal.DoesNotExist:
        raise DealNotFoundError(f"Deal {deal_id} not found")


def pin_in_use(*, vendor: Vendor, pin: str) -> bool:
    return Deal.objects.filter(vendor=vendor, verification_code=pin).exists()


def generate_deal_pin(*, vendor: Vendor) -> str:
    """Generate a 6-character PIN not yet used by any of the vendor's deals."""
    for _ in range(PIN_MAX_ATTEMPTS):
        pin = ''.join(secrets.choice(PIN_ALPHABET) for _ in range(PIN_LENGTH))
        if not pin_in_use(vendor=vendor, pin=pin):
            return pin

    raise RuntimeError(f"Failed to generate a unique deal PIN after {PIN_MAX_ATTEMPTS} attempts")


@transaction.atomic
def create_deal(
    *,
    vendor: Vendor,
    title: str,
    kind: str,
    discount_percentage: int,
    valid_until: datetime,
    description: str = '',
    original_price: Optional[Decimal] = None,
    discounted_price: Optional[Decimal] = None,
    verification_code: Optional[str] = None,
    affiliate_link: str = '',
    max_redemptions: Optional[int] = None,
) -> Deal:
    """
    Create a deal for a vendor.

    In-store deals always carry a PIN; one is generated when none is given.
    Online deals must carry an affiliate link. New deals start unapproved.

    Args:
        vendor: Owning vendor
        title: Deal title
        kind: 'in_store' or 'online'
        discount_percentage: Discount in percent (1-100)
        valid_until: Expiry timestamp
        description: Free text
        original_price: Regular price
        discounted_price: Price after discount
        verification_code: 6-character PIN for in-store deals
        affiliate_link: Target URL for online deals
        max_redemptions: Optional redemption cap

    Returns:
        Created Deal instance

    Raises:
        InvalidDealError: If the data breaks a deal invariant
    """
    if kind not in DealKind.values:
        raise InvalidDealError(f"Unknown deal kind '{kind}'")

    if not 1 <= discount_percentage <= 100:
        raise InvalidDealError("Discount percentage must be between 1 and 100")

    if valid_until <= timezone.now():
        raise InvalidDealError("Deal expiry must be in the future")

    if kind == DealKind.ONLINE and not affiliate_link:
        raise InvalidDealError("Online deals require an affiliate link")

    if original_price is not None and discounted_price is not None and discounted_price > original_price:
        raise InvalidDealError("Discounted price cannot exceed the original price")

    if verification_code:
        verification_code = verification_code.strip().upper()
        if not re.match(PIN_PATTERN, verification_code):
            raise InvalidDealError("Verification code must be 6 characters A-Z or 0-9")
        if pin_in_use(vendor=vendor, pin=verification_code):
            raise InvalidDealError("Verification code is already used by another of your deals")
    elif kind == DealKind.IN_STORE:
        verification_code = generate_deal_pin(vendor=vendor)
    else:
        verification_code = ''

    try:
        with transaction.atomic():
            deal = Deal.objects.create(
                vendor=vendor,
                title=title,
                description=description,
                kind=kind,
                discount_percentage=discount_percentage,
                original_price=original_price,
                discounted_price=discounted_price,
                verification_code=verification_code,
                affiliate_link=affiliate_link,
                max_redemptions=max_redemptions,
                valid_until=valid_until,
            )
    except IntegrityError:
        # A concurrent create took the same PIN after our check
        raise InvalidDealError("Verification code is already used by another of your deals")

    logger.info("Deal %s created by vendor %s (%s)", deal.id, vendor.id, kind)
    return deal


def ensure_claimable(deal: Deal, now: Optional[datetime] = None) -> None:
    """
    Raise the first reason a deal cannot be claimed right now.

    Raises:
        DealInactiveError: Deal is deactivated or unapproved
        DealExpiredError: Deal is past valid_until
        RedemptionCapReachedError: No redemptions left
    """
    now = now or timezone.now()
    if not (deal.is_active and deal.is_approved):
        raise DealInactiveError(f"Deal {deal.id} is not active")
    if deal.is_expired(now):
        raise DealExpiredError(f"Deal {deal.id} expired at {deal.valid_until.isoformat()}")
    if deal.max_redemptions is not None and deal.current_redemptions >= deal.max_redemptions:
        raise RedemptionCapReachedError(f"Deal {deal.id} has no redemptions left")


def reserve_redemption(*, deal_id: UUID, vendor: Optional[Vendor] = None) -> Deal:
    """
    Take one redemption slot from a deal.

    The cap check and the increment happen in a single conditional UPDATE,
    so concurrent claimants can never push the counter past max_redemptions.
    Run this inside the caller's transaction so a later failure gives the
    slot back.

    Args:
        deal_id: UUID of the deal
        vendor: Restrict the lookup to this vendor's deals

    Returns:
        The deal, refreshed after the increment

    Raises:
        DealNotFoundError: If deal doesn't exist
        DealInactiveError: Deal is deactivated or unapproved
        DealExpiredError: Deal is past valid_until
        RedemptionCapReachedError: No redemptions left
    """
    deal = get_deal(deal_id=deal_id, vendor=vendor)
    now = timezone.now()
    ensure_claimable(deal, now)

    reserved = (
        Deal.objects
        .filter(id=deal.id, is_active=True, is_approved=True, valid_until__gt=now)
        .filter(Q(max_redemptions__isnull=True) | Q(current_redemptions__lt=F('max_redemptions')))
        .update(current_redemptions=F('current_redemptions') + 1)
    )

    if not reserved:
        # Lost a race: report whatever changed underneath us
        deal.refresh_from_db()
        ensure_claimable(deal, now)
        raise RedemptionCapReachedError(f"Deal {deal.id} has no redemptions left")

    deal.refresh_from_db(fields=['current_redemptions'])
    return deal
