from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class ClaimStatus(models.TextChoices):
    CLAIMED = 'claimed', 'Claimed'
    VERIFIED = 'verified', 'Verified'
    USED = 'used', 'Used'
    EXPIRED = 'expired', 'Expired'


class VerificationMethod(models.TextChoices):
    CLAIM_CODE = 'claim_code', 'Claim code'
    QR = 'qr', 'QR code'
    PIN = 'pin', 'Deal PIN'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    CARD = 'card', 'Card'
    UPI = 'upi', 'UPI'
    WALLET = 'wallet', 'Wallet'


class Claim(models.Model):
    """
    A customer's time-bounded credential to redeem one deal once.

    Stored status only ever moves forward (claimed -> verified -> used).
    Expiry is not written back; it is derived from expires_at when read.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    deal = models.ForeignKey(
        'deals.Deal',
        on_delete=models.PROTECT,
        related_name='claims'
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='claims'
    )
    claim_code = models.CharField(max_length=16, unique=True, editable=False)

    issued_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()

    status = models.CharField(
        max_length=20,
        choices=ClaimStatus.choices,
        default=ClaimStatus.CLAIMED
    )

    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        'deals.Vendor',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_claims'
    )
    verification_method = models.CharField(
        max_length=20,
        choices=VerificationMethod.choices,
        blank=True
    )

    used_at = models.DateTimeField(null=True, blank=True)
    bill_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True
    )
    actual_savings = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True
    )

    class Meta:
        db_table = 'claims'
        ordering = ['-issued_at']
        indexes = [
            models.Index(fields=['deal', 'status'], name='claims_deal_status_idx'),
            models.Index(fields=['customer', '-issued_at'], name='claims_customer_issued_idx'),
        ]

    def __str__(self):
        return f"{self.masked_code} ({self.status})"

    @property
    def masked_code(self):
        """Claim code safe for logs and admin lists."""
        return f"***{self.claim_code[-3:]}" if self.claim_code else ''

    def is_expired(self, now=None):
        return (now or timezone.now()) >= self.expires_at

    @property
    def effective_status(self):
        """Stored status with expiry applied at read time."""
        if self.status != ClaimStatus.USED and self.is_expired():
            return ClaimStatus.EXPIRED
        return self.status


class PosSession(models.Model):
    """An open or closed checkout session on one vendor terminal."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        'deals.Vendor',
        on_delete=models.CASCADE,
        related_name='pos_sessions'
    )
    terminal_id = models.CharField(max_length=64)
    session_token = models.CharField(max_length=64, unique=True, editable=False)

    is_active = models.BooleanField(default=True)
    started_at = models.DateTimeField(auto_now_add=True)
    ended_at = models.DateTimeField(null=True, blank=True)

    total_transactions = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    total_savings = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    class Meta:
        db_table = 'pos_sessions'
        ordering = ['-started_at']
        constraints = [
            models.UniqueConstraint(
                fields=['vendor', 'terminal_id'],
                condition=models.Q(is_active=True),
                name='unique_active_session_per_terminal',
            ),
        ]

    def __str__(self):
        state = 'open' if self.is_active else 'closed'
        return f"{self.vendor} / {self.terminal_id} ({state})"


class Transaction(models.Model):
    """Completed POS checkout consuming exactly one claim."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    claim = models.OneToOneField(
        Claim,
        on_delete=models.PROTECT,
        related_name='transaction'
    )
    vendor = models.ForeignKey(
        'deals.Vendor',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    deal = models.ForeignKey(
        'deals.Deal',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    session = models.ForeignKey(
        PosSession,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )

    bill_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    savings_amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices
    )
    receipt_number = models.CharField(max_length=32, unique=True, editable=False)
    notes = models.TextField(blank=True)
    processed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'pos_transactions'
        ordering = ['-processed_at']
        indexes = [
            models.Index(fields=['vendor', '-processed_at'], name='pos_tx_vendor_processed_idx'),
        ]

    def __str__(self):
        return f"{self.receipt_number}: {self.bill_amount}"

    @property
    def final_amount(self):
        return self.bill_amount - self.savings_amount
