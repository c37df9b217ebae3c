"""
Vendor-side verification of customer credentials.

Only claim-code (and claim QR) verification mutates state: it moves a claim
from ``claimed`` to ``verified`` with one conditional UPDATE, so two
terminals scanning the same code can never both succeed. Token and PIN
verification are read-only lookups.
"""

import json
import logging
import re
from datetime import datetime, timezone as dt_timezone
from typing import Optional, Union

from django.utils import timezone

from apps.deals.models import Deal, DealKind, Vendor, PIN_PATTERN

from ..models import Claim, ClaimStatus, VerificationMethod
from .codes import normalize_code, mask_code
from .issuance import QR_PAYLOAD_TYPE
from .membership import decode_membership_token
from .exceptions import (
    CodeNotFoundError,
    CodeExpiredError,
    CodeAlreadyUsedError,
    AlreadyVerifiedError,
    WrongVendorError,
    InvalidQRPayloadError,
    InvalidPinError,
)

logger = logging.getLogger(__name__)


def find_claim_by_code(code: str) -> Optional[Claim]:
    return (
        Claim.objects
        .select_related('deal', 'deal__vendor', 'customer')
        .filter(claim_code=code)
        .first()
    )


def _ensure_verifiable(claim: Claim, vendor: Vendor, now: datetime) -> None:
    # A foreign vendor's scan reveals nothing about the claim's state
    if claim.deal.vendor_id != vendor.id:
        raise WrongVendorError("This claim code belongs to a different vendor")
    if claim.is_expired(now):
        raise CodeExpiredError(f"Claim code {mask_code(claim.claim_code)} has expired")
    if claim.status == ClaimStatus.USED:
        raise CodeAlreadyUsedError(f"Claim code {mask_code(claim.claim_code)} has already been used")
    if claim.status == ClaimStatus.VERIFIED:
        raise AlreadyVerifiedError(f"Claim code {mask_code(claim.claim_code)} has already been verified")


def verify_claim_code(
    *,
    code: str,
    vendor: Vendor,
    method: str = VerificationMethod.CLAIM_CODE
) -> Claim:
    """
    Verify a customer's claim code at the vendor's till.

    Runs outside an explicit transaction: the status change is a single
    conditional UPDATE whose row count tells whether this call won.

    Args:
        code: Claim code as typed or scanned (case and whitespace tolerant)
        vendor: Vendor performing the verification
        method: How the code was presented (claim_code or qr)

    Returns:
        The verified Claim with deal and customer loaded

    Raises:
        CodeNotFoundError: No claim with this code
        WrongVendorError: Claim belongs to another vendor's deal
        CodeExpiredError: Claim is past its expiry
        CodeAlreadyUsedError: Claim was already consumed
        AlreadyVerifiedError: Claim was already verified
    """
    code = normalize_code(code)
    claim = find_claim_by_code(code)
    if claim is None:
        raise CodeNotFoundError("Claim code not found")

    now = timezone.now()
    _ensure_verifiable(claim, vendor, now)

    updated = (
        Claim.objects
        .filter(id=claim.id, status=ClaimStatus.CLAIMED, expires_at__gt=now)
        .update(
            status=ClaimStatus.VERIFIED,
            verified_at=now,
            verified_by=vendor,
            verification_method=method,
        )
    )

    if not updated:
        # Someone else moved the claim between our read and our write
        claim.refresh_from_db()
        logger.warning(
            "Lost verification race for claim %s (now %s)",
            mask_code(claim.claim_code), claim.status,
        )
        _ensure_verifiable(claim, vendor, now)
        raise AlreadyVerifiedError(f"Claim code {mask_code(claim.claim_code)} has already been verified")

    claim.status = ClaimStatus.VERIFIED
    claim.verified_at = now
    claim.verified_by = vendor
    claim.verification_method = method

    logger.info(
        "Claim %s verified by vendor %s via %s",
        mask_code(claim.claim_code), vendor.id, method,
    )
    return claim


def parse_claim_qr(qr_data: Union[str, dict]) -> dict:
    """
    Decode a scanned claim QR payload.

    Raises:
        InvalidQRPayloadError: Not JSON, not a claim payload, or missing the code
    """
    if isinstance(qr_data, str):
        try:
            qr_data = json.loads(qr_data)
        except ValueError:
            raise InvalidQRPayloadError("QR payload is not valid JSON")

    if not isinstance(qr_data, dict) or qr_data.get('type') != QR_PAYLOAD_TYPE:
        raise InvalidQRPayloadError("QR code is not a claim code")

    claim_code = qr_data.get('claim_code')
    if not isinstance(claim_code, str) or not claim_code.strip():
        raise InvalidQRPayloadError("QR payload has no claim code")

    return qr_data


def verify_claim_qr(*, qr_data: Union[str, dict], vendor: Vendor) -> Claim:
    """
    Verify a claim presented as the customer's QR code.

    Same outcome and errors as verify_claim_code, plus InvalidQRPayloadError
    when the payload is malformed or its deal id doesn't match the claim.
    """
    payload = parse_claim_qr(qr_data)
    code = normalize_code(payload['claim_code'])

    deal_id = payload.get('deal_id')
    if deal_id:
        claim = find_claim_by_code(code)
        if claim is not None and str(claim.deal_id) != str(deal_id):
            raise InvalidQRPayloadError("QR payload does not match the claim")

    return verify_claim_code(code=code, vendor=vendor, method=VerificationMethod.QR)


def verify_membership_token(*, token: str, now: Optional[datetime] = None) -> dict:
    """
    Check a customer's membership token.

    Read-only: nothing is consumed or recorded.

    Returns:
        Identity snapshot with customer id, name, tier, savings and expiry

    Raises:
        TokenInvalidError: Bad signature or malformed payload
        TokenExpiredError: Token is past its expiry
    """
    payload = decode_membership_token(token, now=now)

    logger.info("Membership token verified for customer %s", payload['cid'])
    return {
        'customer_id': payload['cid'],
        'name': payload['name'],
        'membership_plan': payload['tier'],
        'total_savings': payload['total_savings'],
        'deals_claimed': payload['deals_claimed'],
        'issued_at': datetime.fromtimestamp(payload['iat'], tz=dt_timezone.utc),
        'expires_at': datetime.fromtimestamp(payload['exp'], tz=dt_timezone.utc),
    }


def verify_deal_pin(*, pin: str, vendor: Vendor) -> Deal:
    """
    Identify which of the vendor's in-store deals a PIN belongs to.

    The PIN is static and shared by every customer of the deal, so this
    never changes state; single use is enforced by the claim created when
    the sale is completed.

    Raises:
        InvalidPinError: PIN is malformed or matches no live deal of this vendor
    """
    pin = normalize_code(pin)
    if not re.match(PIN_PATTERN, pin):
        raise InvalidPinError("PIN must be 6 characters A-Z or 0-9")

    deal = (
        Deal.objects
        .select_related('vendor')
        .filter(
            vendor=vendor,
            kind=DealKind.IN_STORE,
            verification_code=pin,
            is_active=True,
            is_approved=True,
            valid_until__gt=timezone.now(),
        )
        .first()
    )
    if deal is None:
        raise InvalidPinError("PIN does not match any active deal")

    return deal
