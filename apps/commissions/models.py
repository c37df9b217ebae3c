from django.db import models
from django.conf import settings
from django.utils import timezone
from decimal import Decimal
import uuid


class EventType(models.TextChoices):
    CLICK = 'click', 'Click'
    CONVERSION = 'conversion', 'Conversion'


class EventStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    PAID = 'paid', 'Paid'


class BatchStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'


class PayoutBatch(models.Model):
    """
    A settlement of confirmed commission events for one vendor and period.

    Totals are a snapshot taken at creation and never recomputed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        'deals.Vendor',
        on_delete=models.PROTECT,
        related_name='payout_batches'
    )
    period_start = models.DateField()
    period_end = models.DateField()

    event_count = models.PositiveIntegerField(default=0)
    total_commission = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    status = models.CharField(
        max_length=20,
        choices=BatchStatus.choices,
        default=BatchStatus.PENDING
    )
    payment_method = models.CharField(max_length=50, blank=True)
    transaction_reference = models.CharField(max_length=128, blank=True)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payout_batches_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payout_batches_paid'
    )

    class Meta:
        db_table = 'payout_batches'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['vendor', 'status'], name='payout_vendor_status_idx'),
        ]

    def __str__(self):
        return f"{self.vendor} {self.period_start}..{self.period_end}: {self.total_commission}"


class CommissionEvent(models.Model):
    """
    One affiliate click, possibly confirmed later as a conversion.

    ``payout_batch`` doubles as the settlement lock: an event is part of at
    most one batch.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        'deals.Vendor',
        on_delete=models.PROTECT,
        related_name='commission_events'
    )
    deal = models.ForeignKey(
        'deals.Deal',
        on_delete=models.PROTECT,
        related_name='commission_events'
    )
    claim = models.ForeignKey(
        'claims.Claim',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='commission_events'
    )

    event_type = models.CharField(
        max_length=20,
        choices=EventType.choices,
        default=EventType.CLICK
    )
    occurred_at = models.DateTimeField(default=timezone.now)

    # Percent
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    estimated_order_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )
    sale_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True
    )
    commission_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='confirmed_commission_events'
    )
    paid_at = models.DateTimeField(null=True, blank=True)

    payout_batch = models.ForeignKey(
        PayoutBatch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='events'
    )

    class Meta:
        db_table = 'commission_events'
        ordering = ['-occurred_at']
        indexes = [
            models.Index(fields=['vendor', 'status', 'occurred_at'], name='commission_vendor_status_idx'),
            models.Index(fields=['status', 'occurred_at'], name='commission_status_idx'),
        ]

    def __str__(self):
        return f"{self.event_type} {self.commission_amount} ({self.status})"
