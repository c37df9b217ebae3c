"""Payout batches: settle a vendor's confirmed commission for a period."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.deals.services import get_vendor

from ..models import BatchStatus, CommissionEvent, EventStatus, PayoutBatch
from .exceptions import (
    BatchNotFoundError,
    NoConfirmedEventsError,
    OverlappingBatchError,
    AlreadyPaidError,
    InvalidPeriodError,
    InvalidPayoutReferenceError,
)

User = get_user_model()

logger = logging.getLogger(__name__)


def get_batch(*, batch_id: UUID) -> PayoutBatch:
    try:
        return PayoutBatch.objects.select_related('vendor').get(id=batch_id)
    except PayoutBatch.DoesNotExist:
        raise BatchNotFoundError(f"Payout batch {batch_id} not found")


@transaction.atomic
def create_payout_batch(
    *,
    vendor_id: UUID,
    period_start: date,
    period_end: date,
    notes: str = '',
    created_by: Optional[User] = None
) -> PayoutBatch:
    """
    Bundle a vendor's unsettled confirmed events into a payout batch.

    Events are locked to the batch by setting ``payout_batch`` with a
    conditional UPDATE; if any candidate was grabbed by a concurrent batch
    in the meantime the whole operation rolls back.

    Args:
        vendor_id: UUID of the vendor being paid
        period_start: First day included (by event occurred_at)
        period_end: Last day included
        notes: Free-text note
        created_by: Admin creating the batch

    Returns:
        Created PayoutBatch with event_count and total_commission set

    Raises:
        InvalidPeriodError: period_start is after period_end
        VendorNotFoundError: Vendor doesn't exist
        OverlappingBatchError: Period's events already belong to another batch
        NoConfirmedEventsError: Nothing confirmed in the period
    """
    if period_start > period_end:
        raise InvalidPeriodError("Period start must not be after period end")

    vendor = get_vendor(vendor_id=vendor_id)

    in_period = CommissionEvent.objects.filter(
        vendor=vendor,
        status=EventStatus.CONFIRMED,
        occurred_at__date__gte=period_start,
        occurred_at__date__lte=period_end,
    )
    candidates = list(
        in_period
        .filter(payout_batch__isnull=True)
        .values_list('id', 'commission_amount')
    )

    if not candidates:
        if in_period.filter(payout_batch__isnull=False).exists():
            raise OverlappingBatchError(
                "Confirmed events in this period already belong to another payout batch"
            )
        raise NoConfirmedEventsError(
            f"No confirmed commission events for vendor {vendor.id} "
            f"between {period_start} and {period_end}"
        )

    event_ids = [event_id for event_id, _ in candidates]
    total = sum((amount for _, amount in candidates), Decimal('0.00'))

    batch = PayoutBatch.objects.create(
        vendor=vendor,
        period_start=period_start,
        period_end=period_end,
        event_count=len(event_ids),
        total_commission=total,
        notes=notes,
        created_by=created_by,
    )

    locked = CommissionEvent.objects.filter(
        id__in=event_ids,
        payout_batch__isnull=True,
        status=EventStatus.CONFIRMED,
    ).update(payout_batch=batch)

    if locked != len(event_ids):
        logger.warning(
            "Payout batch for vendor %s locked %d of %d events, rolling back",
            vendor.id, locked, len(event_ids),
        )
        raise OverlappingBatchError("Some events were claimed by another payout batch")

    logger.info(
        "Payout batch %s created for vendor %s: %d events, %s total",
        batch.id, vendor.id, batch.event_count, batch.total_commission,
    )
    return batch


@transaction.atomic
def mark_batch_paid(
    *,
    batch_id: UUID,
    payment_method: str,
    transaction_reference: str,
    paid_by: Optional[User] = None
) -> PayoutBatch:
    """
    Record that a payout batch was paid out.

    Args:
        batch_id: UUID of the batch
        payment_method: How the vendor was paid (bank transfer, UPI...)
        transaction_reference: Payment reference, required
        paid_by: Admin recording the payment

    Returns:
        The updated PayoutBatch

    Raises:
        InvalidPayoutReferenceError: Reference is empty
        BatchNotFoundError: Batch doesn't exist
        AlreadyPaidError: Batch was already paid
    """
    transaction_reference = (transaction_reference or '').strip()
    if not transaction_reference:
        raise InvalidPayoutReferenceError("A transaction reference is required")

    batch = get_batch(batch_id=batch_id)
    now = timezone.now()

    updated = PayoutBatch.objects.filter(id=batch.id, status=BatchStatus.PENDING).update(
        status=BatchStatus.PAID,
        payment_method=(payment_method or '').strip(),
        transaction_reference=transaction_reference,
        paid_at=now,
        paid_by=paid_by,
    )
    if not updated:
        raise AlreadyPaidError(f"Payout batch {batch_id} has already been paid")

    settled = CommissionEvent.objects.filter(
        payout_batch=batch,
        status=EventStatus.CONFIRMED,
    ).update(status=EventStatus.PAID, paid_at=now)

    batch.refresh_from_db()
    logger.info("Payout batch %s marked paid (%d events settled)", batch.id, settled)
    return batch
