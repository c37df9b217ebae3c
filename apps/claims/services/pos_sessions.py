"""POS session registry: one open checkout session per vendor terminal."""

import logging
from decimal import Decimal
from typing import Tuple
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import F
from django.utils import timezone

from apps.deals.models import Vendor

from ..models import PosSession
from .codes import generate_session_token
from .exceptions import PosSessionNotFoundError, PosSessionClosedError

logger = logging.getLogger(__name__)


def open_session(*, vendor: Vendor, terminal_id: str) -> Tuple[PosSession, bool]:
    """
    Open a POS session for a terminal, or return the one already open.

    Args:
        vendor: Vendor owning the terminal
        terminal_id: Vendor-chosen terminal identifier

    Returns:
        Tuple of (session, created)
    """
    terminal_id = terminal_id.strip()

    existing = PosSession.objects.filter(
        vendor=vendor, terminal_id=terminal_id, is_active=True
    ).first()
    if existing:
        return existing, False

    try:
        with transaction.atomic():
            session = PosSession.objects.create(
                vendor=vendor,
                terminal_id=terminal_id,
                session_token=generate_session_token(),
            )
    except IntegrityError:
        # Another request opened this terminal concurrently
        return PosSession.objects.get(
            vendor=vendor, terminal_id=terminal_id, is_active=True
        ), False

    logger.info("POS session %s opened on terminal %s for vendor %s", session.id, terminal_id, vendor.id)
    return session, True


def get_vendor_session(*, session_id: UUID, vendor: Vendor) -> PosSession:
    try:
        return PosSession.objects.get(id=session_id, vendor=vendor)
    except PosSession.DoesNotExist:
        raise PosSessionNotFoundError(f"POS session {session_id} not found")


def close_session(*, session_id: UUID, vendor: Vendor) -> PosSession:
    """
    Close an open POS session.

    Raises:
        PosSessionNotFoundError: Session doesn't exist or belongs to another vendor
        PosSessionClosedError: Session was already closed
    """
    session = get_vendor_session(session_id=session_id, vendor=vendor)

    closed = PosSession.objects.filter(id=session.id, is_active=True).update(
        is_active=False,
        ended_at=timezone.now(),
    )
    if not closed:
        raise PosSessionClosedError(f"POS session {session_id} is already closed")

    session.refresh_from_db()
    logger.info(
        "POS session %s closed: %d transactions, %s total",
        session.id, session.total_transactions, session.total_amount,
    )
    return session


def record_session_sale(
    *,
    session_id: UUID,
    vendor: Vendor,
    bill_amount: Decimal,
    savings_amount: Decimal
) -> PosSession:
    """
    Add one completed sale to a session's running totals.

    Must run inside the caller's transaction so a rejected session rolls the
    whole sale back.

    Raises:
        PosSessionNotFoundError: Session doesn't exist or belongs to another vendor
        PosSessionClosedError: Session is no longer active
    """
    updated = PosSession.objects.filter(id=session_id, vendor=vendor, is_active=True).update(
        total_transactions=F('total_transactions') + 1,
        total_amount=F('total_amount') + bill_amount,
        total_savings=F('total_savings') + savings_amount,
    )
    if not updated:
        session = get_vendor_session(session_id=session_id, vendor=vendor)
        raise PosSessionClosedError(f"POS session {session.id} is closed")

    return PosSession.objects.get(id=session_id)
