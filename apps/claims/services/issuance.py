"""
Claim issuance service.

Turns a customer's intent to redeem a deal into a claim with a unique,
time-bounded claim code. Online deals additionally hand back the affiliate
link and, when monetized, log a click in the commission ledger.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.deals.models import Deal, DealKind
from apps.deals.services import reserve_redemption
from apps.commissions.services import record_click

from ..models import Claim
from .codes import generate_claim_code, mask_code
from .exceptions import ClaimCodeGenerationError, ClaimNotFoundError

User = get_user_model()

logger = logging.getLogger(__name__)

QR_PAYLOAD_TYPE = 'dealz_claim'


@dataclass
class ClaimIssuance:
    """Result of issuing a claim."""

    claim: Claim
    affiliate_link: Optional[str] = None
    click_event_id: Optional[UUID] = None
    qr_payload: dict = field(default_factory=dict)

    @property
    def claim_code(self):
        return self.claim.claim_code

    @property
    def expires_at(self):
        return self.claim.expires_at

    @property
    def deal_kind(self):
        return self.claim.deal.kind


def claim_ttl(deal: Deal):
    if deal.kind == DealKind.ONLINE:
        return settings.CLAIM_TTL_ONLINE
    return settings.CLAIM_TTL_IN_STORE


def build_qr_payload(claim: Claim) -> dict:
    """Payload encoded into the customer's claim QR code."""
    return {
        'type': QR_PAYLOAD_TYPE,
        'claim_code': claim.claim_code,
        'deal_id': str(claim.deal_id),
        'customer_id': str(claim.customer_id),
    }


def create_claim_record(
    *,
    deal: Deal,
    customer: User,
    issued_at: Optional[datetime] = None,
    max_attempts: Optional[int] = None,
    **extra_fields
) -> Claim:
    """
    Insert a claim with a fresh unique code.

    Codes already in the table are skipped before insert; a collision that
    slips through (concurrent insert) hits the unique constraint and is
    retried inside a savepoint so the surrounding transaction survives.

    Args:
        deal: Deal being claimed
        customer: Customer the claim belongs to
        issued_at: Issue time (default now)
        max_attempts: Code generation attempts (default CLAIM_CODE_MAX_ATTEMPTS)
        **extra_fields: Additional Claim fields (status, verification data)

    Returns:
        Created Claim instance

    Raises:
        ClaimCodeGenerationError: If every attempt collided
    """
    issued_at = issued_at or timezone.now()
    max_attempts = max_attempts or settings.CLAIM_CODE_MAX_ATTEMPTS

    for attempt in range(max_attempts):
        code = generate_claim_code()
        if Claim.objects.filter(claim_code=code).exists():
            continue

        try:
            with transaction.atomic():
                return Claim.objects.create(
                    deal=deal,
                    customer=customer,
                    claim_code=code,
                    issued_at=issued_at,
                    expires_at=issued_at + claim_ttl(deal),
                    **extra_fields
                )
        except IntegrityError:
            logger.warning(
                "Claim code collision on insert (attempt %d/%d)", attempt + 1, max_attempts
            )
            continue

    raise ClaimCodeGenerationError(
        f"Failed to generate unique claim code after {max_attempts} attempts"
    )


@transaction.atomic
def issue_claim(*, deal_id: UUID, customer: User) -> ClaimIssuance:
    """
    Issue a claim for a deal.

    Reserving the redemption slot, creating the claim and logging the
    affiliate click happen in one transaction; any failure gives the slot
    back.

    Args:
        deal_id: UUID of the deal
        customer: Customer claiming the deal

    Returns:
        ClaimIssuance with the claim, QR payload and, for online deals,
        the affiliate link and click event id

    Raises:
        DealNotFoundError: If deal doesn't exist
        DealInactiveError: If deal is deactivated or unapproved
        DealExpiredError: If deal is past valid_until
        RedemptionCapReachedError: If deal has no redemptions left
        ClaimCodeGenerationError: If no unique code could be generated
    """
    deal = reserve_redemption(deal_id=deal_id)
    claim = create_claim_record(deal=deal, customer=customer)

    issuance = ClaimIssuance(claim=claim, qr_payload=build_qr_payload(claim))

    if deal.kind == DealKind.ONLINE:
        issuance.affiliate_link = deal.affiliate_link or None
        if deal.is_monetized:
            event = record_click(vendor_id=deal.vendor_id, deal_id=deal.id, claim=claim)
            issuance.click_event_id = event.id

    logger.info(
        "Claim %s issued for deal %s to customer %s (expires %s)",
        mask_code(claim.claim_code), deal.id, customer.id, claim.expires_at.isoformat(),
    )
    return issuance


def get_customer_claim(*, claim_id: UUID, customer: User) -> Claim:
    """Fetch one of the customer's own claims."""
    try:
        return (
            Claim.objects
            .select_related('deal', 'deal__vendor')
            .get(id=claim_id, customer=customer)
        )
    except Claim.DoesNotExist:
        raise ClaimNotFoundError(f"Claim {claim_id} not found")
