"""
Membership token service.

A membership token is a signed, self-contained snapshot of a customer's
identity, tier and savings that a vendor can check without a database
lookup. Nothing is persisted: validity is decided by the signature and the
embedded expiry alone.
"""

import base64
import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Optional

import qrcode
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing
from django.utils import timezone

from apps.accounts.services import get_savings_snapshot

from .exceptions import TokenInvalidError, TokenExpiredError

User = get_user_model()

logger = logging.getLogger(__name__)

PAYLOAD_KEYS = {'cid', 'name', 'tier', 'total_savings', 'deals_claimed', 'iat', 'exp'}


@dataclass
class MembershipTokenBundle:
    token: str
    payload: dict
    issued_at: datetime
    expires_at: datetime


def issue_membership_token(*, customer: User, now: Optional[datetime] = None) -> MembershipTokenBundle:
    """
    Sign a membership token for a customer.

    Args:
        customer: Authenticated customer
        now: Issue time (default now), mostly useful in tests

    Returns:
        MembershipTokenBundle with the token string and decoded payload
    """
    issued_at = now or timezone.now()
    expires_at = issued_at + settings.MEMBERSHIP_TOKEN_TTL
    savings = get_savings_snapshot(customer)

    payload = {
        'cid': str(customer.id),
        'name': customer.get_display_name(),
        'tier': customer.membership_plan,
        'total_savings': str(savings['total_savings']),
        'deals_claimed': savings['deals_claimed'],
        'iat': int(issued_at.timestamp()),
        'exp': int(expires_at.timestamp()),
    }
    token = signing.dumps(payload, salt=settings.MEMBERSHIP_TOKEN_SALT, compress=True)

    logger.info("Membership token issued for customer %s", customer.id)
    return MembershipTokenBundle(
        token=token,
        payload=payload,
        issued_at=issued_at,
        expires_at=expires_at,
    )


def decode_membership_token(token: str, now: Optional[datetime] = None) -> dict:
    """
    Check a token's signature and expiry and return its payload.

    Raises:
        TokenInvalidError: Bad signature or malformed payload
        TokenExpiredError: Past the embedded expiry
    """
    try:
        payload = signing.loads(token, salt=settings.MEMBERSHIP_TOKEN_SALT)
    except signing.BadSignature:
        raise TokenInvalidError("Membership token signature is invalid")

    if not isinstance(payload, dict) or not PAYLOAD_KEYS.issubset(payload):
        raise TokenInvalidError("Membership token payload is malformed")

    now = now or timezone.now()
    if now.timestamp() >= payload['exp']:
        raise TokenExpiredError("Membership token has expired")

    return payload


def render_membership_qr(token: str) -> str:
    """Render a token as a PNG QR code and return it as a data URI."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(token)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format='PNG')
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{encoded}"
