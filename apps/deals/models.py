from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.utils import timezone
from decimal import Decimal
import uuid


PIN_PATTERN = r'^[A-Z0-9]{6}$'


class DealKind(models.TextChoices):
    IN_STORE = 'in_store', 'In store'
    ONLINE = 'online', 'Online'


class Vendor(models.Model):
    """
    Business profile owned by a vendor account.

    Commission rates are percentages; when left empty the platform-wide
    defaults from settings apply.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='vendor_profile'
    )
    business_name = models.CharField(max_length=200)
    city = models.CharField(max_length=100, blank=True)
    is_approved = models.BooleanField(default=False)

    # Affiliate commission
    commission_enabled = models.BooleanField(default=False)
    click_commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))]
    )
    conversion_commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))]
    )

    total_redemptions = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'vendors'
        ordering = ['business_name']

    def __str__(self):
        return self.business_name


class Deal(models.Model):
    """A discount offered by a vendor, either redeemed in store or via an affiliate link."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.CASCADE,
        related_name='deals'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    kind = models.CharField(
        max_length=20,
        choices=DealKind.choices,
        default=DealKind.IN_STORE
    )

    discount_percentage = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(100)]
    )
    original_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    discounted_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Static PIN shown to the vendor's staff, reused across many claims
    verification_code = models.CharField(
        max_length=6,
        blank=True,
        validators=[RegexValidator(PIN_PATTERN, 'PIN must be 6 characters A-Z or 0-9.')]
    )
    affiliate_link = models.URLField(max_length=500, blank=True)

    is_active = models.BooleanField(default=True)
    is_approved = models.BooleanField(default=False)

    max_redemptions = models.PositiveIntegerField(null=True, blank=True)
    current_redemptions = models.PositiveIntegerField(default=0)

    valid_until = models.DateTimeField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'deals'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['vendor', 'is_active'], name='deals_vendor_active_idx'),
            models.Index(fields=['valid_until'], name='deals_valid_until_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['vendor', 'verification_code'],
                condition=~models.Q(verification_code=''),
                name='unique_vendor_verification_code',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.vendor})"

    @property
    def is_online(self):
        return self.kind == DealKind.ONLINE

    @property
    def is_monetized(self):
        """Whether claims on this deal feed the affiliate commission ledger."""
        return self.is_online and bool(self.affiliate_link) and self.vendor.commission_enabled

    def is_expired(self, now=None):
        return (now or timezone.now()) >= self.valid_until

    def is_available(self, now=None):
        """Check whether the deal can currently be claimed."""
        if not (self.is_active and self.is_approved) or self.is_expired(now):
            return False
        if self.max_redemptions is not None and self.current_redemptions >= self.max_redemptions:
            return False
        return True
