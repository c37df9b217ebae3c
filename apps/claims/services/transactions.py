"""
Transaction processor: consumes a verified claim exactly once.

Savings are computed here and nowhere else. Whatever discount a client
displayed beforehand is only a preview.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.db.models import F
from django.utils import timezone

from apps.accounts.services import credit_savings, UserNotFoundError
from apps.deals.models import Vendor
from apps.deals.services import reserve_redemption

from ..models import Claim, ClaimStatus, PaymentMethod, Transaction, VerificationMethod
from .codes import generate_receipt_number, mask_code
from .issuance import create_claim_record
from .pos_sessions import record_session_sale
from .verification import verify_deal_pin
from .exceptions import (
    ClaimNotFoundError,
    ClaimNotVerifiedError,
    ClaimExpiredError,
    AlreadyUsedError,
    WrongVendorError,
    InvalidBillAmountError,
    InvalidDiscountAmountError,
    InvalidPaymentMethodError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
RECEIPT_MAX_ATTEMPTS = 3


def calculate_savings(bill_amount: Decimal, discount_percentage) -> Decimal:
    """Discount on a bill, rounded half-up to cents."""
    savings = bill_amount * Decimal(discount_percentage) / Decimal('100')
    return savings.quantize(CENTS, rounding=ROUND_HALF_UP)


def _to_amount(value) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _validate_bill(bill_amount) -> Decimal:
    amount = _to_amount(bill_amount)
    if amount is None or amount <= 0:
        raise InvalidBillAmountError("Bill amount must be greater than zero")
    return amount


def _validate_payment_method(payment_method: str) -> None:
    if payment_method not in PaymentMethod.values:
        raise InvalidPaymentMethodError(
            f"Payment method must be one of: {', '.join(PaymentMethod.values)}"
        )


def _ensure_consumable(claim: Claim, vendor: Vendor, now) -> None:
    if claim.deal.vendor_id != vendor.id:
        raise WrongVendorError("This claim belongs to a different vendor")
    if claim.status == ClaimStatus.USED:
        raise AlreadyUsedError(f"Claim {mask_code(claim.claim_code)} has already been used")
    if claim.status != ClaimStatus.VERIFIED:
        raise ClaimNotVerifiedError("Claim must be verified before completing the transaction")
    if claim.is_expired(now):
        raise ClaimExpiredError(f"Claim {mask_code(claim.claim_code)} has expired")


def _create_transaction(**fields) -> Transaction:
    for attempt in range(RECEIPT_MAX_ATTEMPTS):
        try:
            with transaction.atomic():
                return Transaction.objects.create(
                    receipt_number=generate_receipt_number(),
                    **fields
                )
        except IntegrityError:
            if attempt == RECEIPT_MAX_ATTEMPTS - 1:
                raise
    raise RuntimeError("Unexpected error in receipt generation")


def _consume_claim(
    *,
    claim: Claim,
    vendor: Vendor,
    bill_amount: Decimal,
    savings_amount: Decimal,
    payment_method: str,
    session_id: Optional[UUID],
    notes: str
) -> Transaction:
    """Mark a verified claim used and book the sale. Caller holds the transaction."""
    now = timezone.now()

    updated = (
        Claim.objects
        .filter(id=claim.id, status=ClaimStatus.VERIFIED, expires_at__gt=now)
        .update(
            status=ClaimStatus.USED,
            used_at=now,
            bill_amount=bill_amount,
            actual_savings=savings_amount,
        )
    )
    if not updated:
        claim.refresh_from_db()
        logger.warning(
            "Lost completion race for claim %s (now %s)",
            mask_code(claim.claim_code), claim.status,
        )
        _ensure_consumable(claim, vendor, now)
        raise AlreadyUsedError(f"Claim {mask_code(claim.claim_code)} has already been used")

    if session_id is not None:
        record_session_sale(
            session_id=session_id,
            vendor=vendor,
            bill_amount=bill_amount,
            savings_amount=savings_amount,
        )

    sale = _create_transaction(
        claim=claim,
        vendor=vendor,
        deal=claim.deal,
        customer_id=claim.customer_id,
        session_id=session_id,
        bill_amount=bill_amount,
        savings_amount=savings_amount,
        payment_method=payment_method,
        notes=notes,
    )

    credit_savings(customer_id=claim.customer_id, amount=savings_amount)
    Vendor.objects.filter(id=vendor.id).update(total_redemptions=F('total_redemptions') + 1)

    claim.status = ClaimStatus.USED
    claim.used_at = now
    claim.bill_amount = bill_amount
    claim.actual_savings = savings_amount

    logger.info(
        "Claim %s consumed by vendor %s: bill %s, savings %s, receipt %s",
        mask_code(claim.claim_code), vendor.id, bill_amount, savings_amount, sale.receipt_number,
    )
    return sale


def complete_transaction(
    *,
    claim_id: UUID,
    vendor: Vendor,
    bill_amount: Decimal,
    payment_method: str,
    session_id: Optional[UUID] = None,
    notes: str = ''
) -> Transaction:
    """
    Complete a POS sale against a verified claim.

    Never verifies implicitly: a claim still in ``claimed`` is rejected.

    Args:
        claim_id: UUID of the verified claim
        vendor: Vendor completing the sale
        bill_amount: Bill before discount
        payment_method: cash, card, upi or wallet
        session_id: Optional open POS session to book the sale on
        notes: Free-text note printed on the receipt

    Returns:
        Created Transaction with receipt number and savings

    Raises:
        InvalidBillAmountError: Bill is missing or not positive
        InvalidPaymentMethodError: Unknown payment method
        ClaimNotFoundError: Claim doesn't exist
        WrongVendorError: Claim belongs to another vendor's deal
        AlreadyUsedError: Claim was already consumed
        ClaimNotVerifiedError: Claim was never verified
        ClaimExpiredError: Claim is past its expiry
        PosSessionNotFoundError: Session doesn't exist for this vendor
        PosSessionClosedError: Session is closed
    """
    bill_amount = _validate_bill(bill_amount)
    _validate_payment_method(payment_method)

    try:
        claim = Claim.objects.select_related('deal').get(id=claim_id)
    except Claim.DoesNotExist:
        raise ClaimNotFoundError(f"Claim {claim_id} not found")

    _ensure_consumable(claim, vendor, timezone.now())
    savings_amount = calculate_savings(bill_amount, claim.deal.discount_percentage)

    with transaction.atomic():
        return _consume_claim(
            claim=claim,
            vendor=vendor,
            bill_amount=bill_amount,
            savings_amount=savings_amount,
            payment_method=payment_method,
            session_id=session_id,
            notes=notes,
        )


def complete_pin_transaction(
    *,
    pin: str,
    vendor: Vendor,
    customer_id: UUID,
    bill_amount: Decimal,
    discount_amount: Decimal,
    payment_method: str,
    session_id: Optional[UUID] = None,
    notes: str = ''
) -> Transaction:
    """
    Complete a sale for a customer who presented the deal's static PIN.

    A fresh claim is issued for the customer, stored as verified and
    consumed in the same transaction, so every PIN redemption leaves its
    own single-use claim record and counts against the deal's cap.

    Args:
        pin: The deal's 6-character PIN
        vendor: Vendor completing the sale
        customer_id: UUID of the customer redeeming
        bill_amount: Bill before discount
        discount_amount: Discount entered by the vendor
        payment_method: cash, card, upi or wallet
        session_id: Optional open POS session
        notes: Free-text note

    Returns:
        Created Transaction

    Raises:
        InvalidBillAmountError: Bill is missing or not positive
        InvalidDiscountAmountError: Discount is negative or exceeds the bill
        InvalidPaymentMethodError: Unknown payment method
        InvalidPinError: PIN matches no live deal of this vendor
        UserNotFoundError: Customer doesn't exist
        RedemptionCapReachedError: Deal has no redemptions left
    """
    bill_amount = _validate_bill(bill_amount)
    discount = _to_amount(discount_amount)
    if discount is None or discount < 0 or discount > bill_amount:
        raise InvalidDiscountAmountError("Discount must be between zero and the bill amount")
    _validate_payment_method(payment_method)

    deal = verify_deal_pin(pin=pin, vendor=vendor)

    try:
        customer = User.objects.get(id=customer_id, is_active=True)
    except User.DoesNotExist:
        raise UserNotFoundError(f"Customer {customer_id} not found")

    with transaction.atomic():
        deal = reserve_redemption(deal_id=deal.id, vendor=vendor)
        now = timezone.now()
        claim = create_claim_record(
            deal=deal,
            customer=customer,
            issued_at=now,
            status=ClaimStatus.VERIFIED,
            verified_at=now,
            verified_by=vendor,
            verification_method=VerificationMethod.PIN,
        )
        return _consume_claim(
            claim=claim,
            vendor=vendor,
            bill_amount=bill_amount,
            savings_amount=discount,
            payment_method=payment_method,
            session_id=session_id,
            notes=notes,
        )
