"""
Service layer unit tests for the claims app.

Tests cover:
- Claim issuance (TTL, unique codes, redemption cap, affiliate clicks)
- Claim code verification and its check order
- Concurrency protection on verification (race conditions)
- Membership tokens
- Deal PINs
- POS transactions and sessions
- Claim funnel reports
"""

import pytest
import threading
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4
from unittest.mock import patch
from django.conf import settings
from django.core import signing
from django.db import connection
from django.test import TransactionTestCase
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.accounts.services import UserNotFoundError
from apps.claims.models import Claim, ClaimStatus, PosSession, Transaction, VerificationMethod
from apps.claims.services import (
    build_qr_payload,
    calculate_savings,
    issue_claim,
    verify_claim_code,
    verify_claim_qr,
    issue_membership_token,
    verify_membership_token,
    render_membership_qr,
    verify_deal_pin,
    complete_transaction,
    complete_pin_transaction,
    open_session,
    close_session,
    ClaimReports,
)
from apps.claims.services.codes import CLAIM_CODE_ALPHABET
from apps.claims.services.exceptions import (
    ClaimCodeGenerationError,
    CodeNotFoundError,
    CodeExpiredError,
    CodeAlreadyUsedError,
    AlreadyVerifiedError,
    WrongVendorError,
    InvalidQRPayloadError,
    InvalidPinError,
    TokenInvalidError,
    TokenExpiredError,
    ClaimNotFoundError,
    ClaimNotVerifiedError,
    ClaimExpiredError,
    AlreadyUsedError,
    InvalidBillAmountError,
    InvalidDiscountAmountError,
    InvalidPaymentMethodError,
    PosSessionNotFoundError,
    PosSessionClosedError,
)
from apps.commissions.models import CommissionEvent, EventStatus
from apps.deals.models import Deal, DealKind, Vendor
from apps.deals.services import RedemptionCapReachedError


def expire(claim):
    Claim.objects.filter(id=claim.id).update(expires_at=timezone.now() - timedelta(seconds=1))


# =============================================================================
# Issuance
# =============================================================================

@pytest.mark.django_db
class TestIssueClaim:

    def test_in_store_claim_lives_24_hours(self, customer, in_store_deal):
        issuance = issue_claim(deal_id=in_store_deal.id, customer=customer)
        claim = issuance.claim

        assert claim.status == ClaimStatus.CLAIMED
        assert claim.expires_at - claim.issued_at == timedelta(hours=24)
        assert issuance.affiliate_link is None
        assert issuance.click_event_id is None

    def test_online_claim_lives_30_days(self, customer, online_deal):
        issuance = issue_claim(deal_id=online_deal.id, customer=customer)
        claim = issuance.claim

        assert claim.expires_at - claim.issued_at == timedelta(days=30)
        assert issuance.affiliate_link == online_deal.affiliate_link

    def test_code_format(self, claim):
        assert len(claim.claim_code) == settings.CLAIM_CODE_LENGTH
        assert set(claim.claim_code) <= set(CLAIM_CODE_ALPHABET)

    def test_codes_are_unique(self, customer, in_store_deal):
        codes = {
            issue_claim(deal_id=in_store_deal.id, customer=customer).claim_code
            for _ in range(25)
        }
        assert len(codes) == 25

    def test_counts_against_cap(self, customer, in_store_deal):
        in_store_deal.max_redemptions = 1
        in_store_deal.save(update_fields=['max_redemptions'])

        issue_claim(deal_id=in_store_deal.id, customer=customer)
        with pytest.raises(RedemptionCapReachedError):
            issue_claim(deal_id=in_store_deal.id, customer=customer)

        assert Claim.objects.filter(deal=in_store_deal).count() == 1

    def test_monetized_online_claim_records_click(self, customer, online_deal):
        issuance = issue_claim(deal_id=online_deal.id, customer=customer)

        event = CommissionEvent.objects.get(id=issuance.click_event_id)
        assert event.claim == issuance.claim
        assert event.status == EventStatus.PENDING
        # 5% default click rate on the 850.00 discounted price
        assert event.commission_amount == Decimal('42.50')

    def test_online_claim_without_commission_records_nothing(self, customer, online_deal):
        Vendor.objects.filter(id=online_deal.vendor_id).update(commission_enabled=False)

        issuance = issue_claim(deal_id=online_deal.id, customer=customer)

        assert issuance.affiliate_link == online_deal.affiliate_link
        assert issuance.click_event_id is None
        assert not CommissionEvent.objects.exists()

    def test_retries_on_code_collision(self, customer, in_store_deal, claim):
        with patch('apps.claims.services.issuance.generate_claim_code') as mock_code:
            mock_code.side_effect = [claim.claim_code, 'NEWC0DE2']
            issuance = issue_claim(deal_id=in_store_deal.id, customer=customer)

        assert issuance.claim_code == 'NEWC0DE2'
        assert mock_code.call_count == 2

    def test_gives_slot_back_when_codes_exhausted(self, customer, in_store_deal, claim):
        with patch('apps.claims.services.issuance.generate_claim_code') as mock_code:
            mock_code.return_value = claim.claim_code
            with pytest.raises(ClaimCodeGenerationError):
                issue_claim(deal_id=in_store_deal.id, customer=customer)

        in_store_deal.refresh_from_db()
        assert in_store_deal.current_redemptions == 1

    def test_qr_payload(self, customer, in_store_deal):
        issuance = issue_claim(deal_id=in_store_deal.id, customer=customer)

        assert issuance.qr_payload == {
            'type': 'dealz_claim',
            'claim_code': issuance.claim_code,
            'deal_id': str(in_store_deal.id),
            'customer_id': str(customer.id),
        }


# =============================================================================
# Claim code verification
# =============================================================================

@pytest.mark.django_db
class TestVerifyClaimCode:

    def test_success(self, claim, vendor):
        verified = verify_claim_code(code=claim.claim_code, vendor=vendor)

        assert verified.status == ClaimStatus.VERIFIED
        claim.refresh_from_db()
        assert claim.status == ClaimStatus.VERIFIED
        assert claim.verified_by == vendor
        assert claim.verified_at is not None
        assert claim.verification_method == VerificationMethod.CLAIM_CODE

    def test_code_is_case_and_space_tolerant(self, claim, vendor):
        verified = verify_claim_code(code=f"  {claim.claim_code.lower()} ", vendor=vendor)
        assert verified.id == claim.id

    def test_unknown_code(self, vendor):
        with pytest.raises(CodeNotFoundError):
            verify_claim_code(code='ZZZZZZZZ', vendor=vendor)

    def test_wrong_vendor(self, claim, other_vendor):
        with pytest.raises(WrongVendorError):
            verify_claim_code(code=claim.claim_code, vendor=other_vendor)

        claim.refresh_from_db()
        assert claim.status == ClaimStatus.CLAIMED

    def test_second_verification_rejected(self, claim, vendor):
        verify_claim_code(code=claim.claim_code, vendor=vendor)

        with pytest.raises(AlreadyVerifiedError):
            verify_claim_code(code=claim.claim_code, vendor=vendor)

    def test_expired_claim(self, claim, vendor):
        """A claim issued 25 hours ago can't be verified even though its stored status is claimed."""
        issued_at = timezone.now() - timedelta(hours=25)
        Claim.objects.filter(id=claim.id).update(
            issued_at=issued_at,
            expires_at=issued_at + settings.CLAIM_TTL_IN_STORE,
        )

        with pytest.raises(CodeExpiredError):
            verify_claim_code(code=claim.claim_code, vendor=vendor)

        claim.refresh_from_db()
        assert claim.status == ClaimStatus.CLAIMED
        assert claim.effective_status == ClaimStatus.EXPIRED

    def test_used_claim(self, claim, vendor):
        Claim.objects.filter(id=claim.id).update(status=ClaimStatus.USED)

        with pytest.raises(CodeAlreadyUsedError):
            verify_claim_code(code=claim.claim_code, vendor=vendor)

    def test_vendor_checked_before_expiry(self, claim, other_vendor):
        """Another vendor gets wrong_vendor, not the claim's expiry or usage state."""
        expire(claim)

        with pytest.raises(WrongVendorError):
            verify_claim_code(code=claim.claim_code, vendor=other_vendor)

    def test_vendor_checked_before_usage(self, claim, other_vendor):
        Claim.objects.filter(id=claim.id).update(status=ClaimStatus.USED)

        with pytest.raises(WrongVendorError):
            verify_claim_code(code=claim.claim_code, vendor=other_vendor)

    def test_lost_race_reports_already_verified(self, claim, vendor):
        """The read sees 'claimed' but another terminal verifies before our UPDATE."""
        stale = Claim.objects.select_related('deal').get(id=claim.id)
        Claim.objects.filter(id=claim.id).update(
            status=ClaimStatus.VERIFIED,
            verified_at=timezone.now(),
            verified_by=vendor,
        )

        with patch('apps.claims.services.verification.find_claim_by_code', return_value=stale):
            with pytest.raises(AlreadyVerifiedError):
                verify_claim_code(code=claim.claim_code, vendor=vendor)


@pytest.mark.django_db
class TestVerifyClaimQR:

    def test_dict_payload(self, claim, vendor):
        verified = verify_claim_qr(qr_data=build_qr_payload(claim), vendor=vendor)

        assert verified.status == ClaimStatus.VERIFIED
        assert verified.verification_method == VerificationMethod.QR

    def test_string_payload(self, claim, vendor):
        raw = (
            '{"type": "dealz_claim", "claim_code": "%s", "deal_id": "%s"}'
            % (claim.claim_code, claim.deal_id)
        )
        verified = verify_claim_qr(qr_data=raw, vendor=vendor)
        assert verified.id == claim.id

    def test_deal_mismatch(self, claim, vendor):
        payload = build_qr_payload(claim)
        payload['deal_id'] = str(uuid4())

        with pytest.raises(InvalidQRPayloadError):
            verify_claim_qr(qr_data=payload, vendor=vendor)

    @pytest.mark.parametrize('qr_data', [
        'not json at all',
        '[1, 2, 3]',
        {'type': 'something_else', 'claim_code': 'ABCDEFGH'},
        {'type': 'dealz_claim'},
    ])
    def test_malformed_payload(self, vendor, qr_data):
        with pytest.raises(InvalidQRPayloadError):
            verify_claim_qr(qr_data=qr_data, vendor=vendor)


class TestConcurrentVerification(TransactionTestCase):
    """
    Two terminals scanning the same code at the same moment.

    TransactionTestCase is required so every thread commits through its own
    database connection.
    """

    def setUp(self):
        self.customer = User.objects.create_user(
            email='racer@test.com',
            password='TestPass123!',
        )
        vendor_user = User.objects.create_user(
            email='till@test.com',
            password='TestPass123!',
            role=UserRole.VENDOR,
        )
        self.vendor = Vendor.objects.create(user=vendor_user, business_name='Race Cafe', is_approved=True)
        self.deal = Deal.objects.create(
            vendor=self.vendor,
            title='Race deal',
            kind=DealKind.IN_STORE,
            discount_percentage=10,
            verification_code='RACE01',
            is_approved=True,
            valid_until=timezone.now() + timedelta(days=1),
        )
        self.claim = issue_claim(deal_id=self.deal.id, customer=self.customer).claim

    def test_exactly_one_verification_wins(self):
        results = []
        errors = []

        def verify():
            """Verify the claim in a thread."""
            try:
                results.append(verify_claim_code(code=self.claim.claim_code, vendor=self.vendor))
            except AlreadyVerifiedError as e:
                errors.append(e)
            except Exception as e:
                errors.append(f"Unexpected error: {e}")
            finally:
                connection.close()

        threads = [threading.Thread(target=verify) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 1, f"Expected 1 successful verification, got {len(results)}"
        assert len(errors) == 4
        assert all(isinstance(e, AlreadyVerifiedError) for e in errors), errors

        self.claim.refresh_from_db()
        assert self.claim.status == ClaimStatus.VERIFIED


# =============================================================================
# Membership tokens
# =============================================================================

@pytest.mark.django_db
class TestMembershipToken:

    def test_round_trip(self, customer):
        customer.total_savings = Decimal('120.50')
        customer.deals_claimed = 3
        customer.save(update_fields=['total_savings', 'deals_claimed'])

        bundle = issue_membership_token(customer=customer)
        identity = verify_membership_token(token=bundle.token)

        assert identity['customer_id'] == str(customer.id)
        assert identity['name'] == 'Asha Customer'
        assert identity['membership_plan'] == 'basic'
        assert identity['total_savings'] == '120.50'
        assert identity['deals_claimed'] == 3
        assert bundle.expires_at - bundle.issued_at == timedelta(hours=24)

    def test_expired(self, customer):
        bundle = issue_membership_token(customer=customer)

        with pytest.raises(TokenExpiredError):
            verify_membership_token(token=bundle.token, now=bundle.expires_at + timedelta(seconds=1))

    def test_issued_in_the_past(self, customer):
        bundle = issue_membership_token(customer=customer, now=timezone.now() - timedelta(hours=25))

        with pytest.raises(TokenExpiredError):
            verify_membership_token(token=bundle.token)

    def test_tampered_signature(self, customer):
        token = issue_membership_token(customer=customer).token
        tampered = token[:-1] + ('A' if token[-1] != 'A' else 'B')

        with pytest.raises(TokenInvalidError):
            verify_membership_token(token=tampered)

    def test_signed_with_other_salt(self, customer):
        token = signing.dumps({'cid': str(customer.id)}, salt='someone-else')

        with pytest.raises(TokenInvalidError):
            verify_membership_token(token=token)

    def test_missing_fields(self, customer):
        token = signing.dumps({'cid': str(customer.id)}, salt=settings.MEMBERSHIP_TOKEN_SALT)

        with pytest.raises(TokenInvalidError):
            verify_membership_token(token=token)

    def test_qr_image(self, customer):
        token = issue_membership_token(customer=customer).token
        assert render_membership_qr(token).startswith('data:image/png;base64,')


# =============================================================================
# Deal PIN
# =============================================================================

@pytest.mark.django_db
class TestVerifyDealPin:

    def test_matches_deal(self, in_store_deal, vendor):
        assert verify_deal_pin(pin='cafe20', vendor=vendor) == in_store_deal

    def test_wrong_pin(self, in_store_deal, vendor):
        with pytest.raises(InvalidPinError):
            verify_deal_pin(pin='NOPE00', vendor=vendor)

    def test_other_vendors_pin(self, in_store_deal, other_vendor):
        with pytest.raises(InvalidPinError):
            verify_deal_pin(pin='CAFE20', vendor=other_vendor)

    def test_malformed_pin(self, vendor):
        with pytest.raises(InvalidPinError):
            verify_deal_pin(pin='CAFE-20', vendor=vendor)

    def test_expired_deal(self, in_store_deal, vendor):
        Deal.objects.filter(id=in_store_deal.id).update(valid_until=timezone.now() - timedelta(minutes=1))

        with pytest.raises(InvalidPinError):
            verify_deal_pin(pin='CAFE20', vendor=vendor)

    def test_pin_is_reusable(self, in_store_deal, vendor):
        verify_deal_pin(pin='CAFE20', vendor=vendor)
        assert verify_deal_pin(pin='CAFE20', vendor=vendor) == in_store_deal


# =============================================================================
# POS transactions
# =============================================================================

@pytest.mark.django_db
class TestCalculateSavings:

    def test_rounds_half_up(self):
        assert calculate_savings(Decimal('10.10'), 25) == Decimal('2.53')

    def test_full_discount(self):
        assert calculate_savings(Decimal('99.99'), 100) == Decimal('99.99')


@pytest.mark.django_db
class TestCompleteTransaction:

    def test_success(self, verified_claim, vendor, customer):
        sale = complete_transaction(
            claim_id=verified_claim.id,
            vendor=vendor,
            bill_amount=Decimal('457.85'),
            payment_method='upi',
        )

        assert sale.savings_amount == Decimal('91.57')
        assert sale.final_amount == Decimal('366.28')
        assert sale.receipt_number.startswith('POS')

        verified_claim.refresh_from_db()
        assert verified_claim.status == ClaimStatus.USED
        assert verified_claim.used_at is not None
        assert verified_claim.bill_amount == Decimal('457.85')
        assert verified_claim.actual_savings == Decimal('91.57')

        customer.refresh_from_db()
        assert customer.total_savings == Decimal('91.57')
        assert customer.deals_claimed == 1

        vendor.refresh_from_db()
        assert vendor.total_redemptions == 1

    def test_requires_verification(self, claim, vendor):
        with pytest.raises(ClaimNotVerifiedError):
            complete_transaction(
                claim_id=claim.id,
                vendor=vendor,
                bill_amount=Decimal('100.00'),
                payment_method='cash',
            )

        claim.refresh_from_db()
        assert claim.status == ClaimStatus.CLAIMED

    def test_single_use(self, verified_claim, vendor, customer):
        complete_transaction(
            claim_id=verified_claim.id,
            vendor=vendor,
            bill_amount=Decimal('100.00'),
            payment_method='cash',
        )

        with pytest.raises(AlreadyUsedError):
            complete_transaction(
                claim_id=verified_claim.id,
                vendor=vendor,
                bill_amount=Decimal('100.00'),
                payment_method='cash',
            )

        assert Transaction.objects.filter(claim=verified_claim).count() == 1
        customer.refresh_from_db()
        assert customer.total_savings == Decimal('20.00')

    def test_wrong_vendor(self, verified_claim, other_vendor):
        with pytest.raises(WrongVendorError):
            complete_transaction(
                claim_id=verified_claim.id,
                vendor=other_vendor,
                bill_amount=Decimal('100.00'),
                payment_method='cash',
            )

    def test_expired_after_verification(self, verified_claim, vendor):
        expire(verified_claim)

        with pytest.raises(ClaimExpiredError):
            complete_transaction(
                claim_id=verified_claim.id,
                vendor=vendor,
                bill_amount=Decimal('100.00'),
                payment_method='card',
            )

    def test_unknown_claim(self, vendor):
        with pytest.raises(ClaimNotFoundError):
            complete_transaction(
                claim_id=uuid4(),
                vendor=vendor,
                bill_amount=Decimal('100.00'),
                payment_method='card',
            )

    @pytest.mark.parametrize('bill', [Decimal('0'), Decimal('-5.00'), None])
    def test_invalid_bill(self, verified_claim, vendor, bill):
        with pytest.raises(InvalidBillAmountError):
            complete_transaction(
                claim_id=verified_claim.id,
                vendor=vendor,
                bill_amount=bill,
                payment_method='card',
            )

    def test_invalid_payment_method(self, verified_claim, vendor):
        with pytest.raises(InvalidPaymentMethodError):
            complete_transaction(
                claim_id=verified_claim.id,
                vendor=vendor,
                bill_amount=Decimal('100.00'),
                payment_method='cheque',
            )

    def test_books_sale_on_session(self, verified_claim, vendor):
        session, _ = open_session(vendor=vendor, terminal_id='till-1')

        sale = complete_transaction(
            claim_id=verified_claim.id,
            vendor=vendor,
            bill_amount=Decimal('250.00'),
            payment_method='card',
            session_id=session.id,
        )

        session.refresh_from_db()
        assert sale.session == session
        assert session.total_transactions == 1
        assert session.total_amount == Decimal('250.00')
        assert session.total_savings == Decimal('50.00')

    def test_closed_session_rolls_back(self, verified_claim, vendor, customer):
        session, _ = open_session(vendor=vendor, terminal_id='till-1')
        close_session(session_id=session.id, vendor=vendor)

        with pytest.raises(PosSessionClosedError):
            complete_transaction(
                claim_id=verified_claim.id,
                vendor=vendor,
                bill_amount=Decimal('250.00'),
                payment_method='card',
                session_id=session.id,
            )

        verified_claim.refresh_from_db()
        assert verified_claim.status == ClaimStatus.VERIFIED
        customer.refresh_from_db()
        assert customer.total_savings == Decimal('0.00')


@pytest.mark.django_db
class TestCompletePinTransaction:

    def test_success(self, in_store_deal, vendor, customer):
        sale = complete_pin_transaction(
            pin='CAFE20',
            vendor=vendor,
            customer_id=customer.id,
            bill_amount=Decimal('300.00'),
            discount_amount=Decimal('45.00'),
            payment_method='cash',
        )

        assert sale.savings_amount == Decimal('45.00')
        assert sale.claim.status == ClaimStatus.USED
        assert sale.claim.verification_method == VerificationMethod.PIN
        assert sale.claim.verified_by == vendor

        in_store_deal.refresh_from_db()
        assert in_store_deal.current_redemptions == 1
        customer.refresh_from_db()
        assert customer.total_savings == Decimal('45.00')

    def test_each_redemption_gets_its_own_claim(self, in_store_deal, vendor, customer):
        for _ in range(2):
            complete_pin_transaction(
                pin='CAFE20',
                vendor=vendor,
                customer_id=customer.id,
                bill_amount=Decimal('100.00'),
                discount_amount=Decimal('10.00'),
                payment_method='cash',
            )

        assert Claim.objects.filter(deal=in_store_deal, status=ClaimStatus.USED).count() == 2

    def test_discount_above_bill(self, in_store_deal, vendor, customer):
        with pytest.raises(InvalidDiscountAmountError):
            complete_pin_transaction(
                pin='CAFE20',
                vendor=vendor,
                customer_id=customer.id,
                bill_amount=Decimal('100.00'),
                discount_amount=Decimal('100.01'),
                payment_method='cash',
            )

    def test_unknown_customer(self, in_store_deal, vendor):
        with pytest.raises(UserNotFoundError):
            complete_pin_transaction(
                pin='CAFE20',
                vendor=vendor,
                customer_id=uuid4(),
                bill_amount=Decimal('100.00'),
                discount_amount=Decimal('10.00'),
                payment_method='cash',
            )

    def test_respects_cap(self, in_store_deal, vendor, customer):
        Deal.objects.filter(id=in_store_deal.id).update(max_redemptions=1, current_redemptions=1)

        with pytest.raises(RedemptionCapReachedError):
            complete_pin_transaction(
                pin='CAFE20',
                vendor=vendor,
                customer_id=customer.id,
                bill_amount=Decimal('100.00'),
                discount_amount=Decimal('10.00'),
                payment_method='cash',
            )

        assert not Claim.objects.filter(deal=in_store_deal).exists()


# =============================================================================
# POS sessions
# =============================================================================

@pytest.mark.django_db
class TestPosSessions:

    def test_open_is_idempotent_per_terminal(self, vendor):
        first, created = open_session(vendor=vendor, terminal_id='till-1')
        again, created_again = open_session(vendor=vendor, terminal_id='till-1')

        assert created is True
        assert created_again is False
        assert again.id == first.id
        assert first.session_token.startswith('pos_')

    def test_terminals_are_independent(self, vendor):
        one, _ = open_session(vendor=vendor, terminal_id='till-1')
        two, _ = open_session(vendor=vendor, terminal_id='till-2')
        assert one.id != two.id

    def test_close(self, vendor):
        session, _ = open_session(vendor=vendor, terminal_id='till-1')
        closed = close_session(session_id=session.id, vendor=vendor)

        assert closed.is_active is False
        assert closed.ended_at is not None

    def test_close_twice(self, vendor):
        session, _ = open_session(vendor=vendor, terminal_id='till-1')
        close_session(session_id=session.id, vendor=vendor)

        with pytest.raises(PosSessionClosedError):
            close_session(session_id=session.id, vendor=vendor)

    def test_reopen_after_close(self, vendor):
        session, _ = open_session(vendor=vendor, terminal_id='till-1')
        close_session(session_id=session.id, vendor=vendor)

        fresh, created = open_session(vendor=vendor, terminal_id='till-1')
        assert created is True
        assert fresh.id != session.id
        assert PosSession.objects.filter(vendor=vendor).count() == 2

    def test_other_vendors_session(self, vendor, other_vendor):
        session, _ = open_session(vendor=vendor, terminal_id='till-1')

        with pytest.raises(PosSessionNotFoundError):
            close_session(session_id=session.id, vendor=other_vendor)


@pytest.mark.django_db
class TestClaimReports:

    def test_summary(self, claim_funnel):
        summary = ClaimReports.summary()

        assert summary['total_claims'] == 5
        assert summary['verified_claims'] == 2
        assert summary['used_claims'] == 1
        assert summary['expired_claims'] == 1
        assert summary['total_savings'] == Decimal('100.00')
        assert summary['average_savings'] == Decimal('100.00')
        assert summary['verification_rate'] == Decimal('40.00')
        assert summary['redemption_rate'] == Decimal('50.00')

    def test_summary_for_vendor(self, claim_funnel, other_vendor):
        summary = ClaimReports.summary(vendor_id=other_vendor.id)

        assert summary['total_claims'] == 1
        assert summary['verified_claims'] == 0
        assert summary['redemption_rate'] == Decimal('0.00')

    def test_summary_of_empty_ledger(self, db):
        summary = ClaimReports.summary()

        assert summary['total_claims'] == 0
        assert summary['total_savings'] == Decimal('0.00')
        assert summary['average_savings'] == Decimal('0.00')
        assert summary['verification_rate'] == Decimal('0.00')

    def test_period_excludes_other_days(self, claim_funnel):
        tomorrow = timezone.localdate() + timedelta(days=1)

        summary = ClaimReports.summary(start_date=tomorrow)

        assert summary['total_claims'] == 0
        assert summary['period_start'] == tomorrow

    def test_vendor_breakdown(self, claim_funnel, vendor, other_vendor):
        rows = ClaimReports.vendor_breakdown()

        assert [row['vendor_id'] for row in rows] == [vendor.id, other_vendor.id]
        assert rows[0]['business_name'] == 'Blue Tokai Cafe'
        assert rows[0]['total_claims'] == 4
        assert rows[0]['verification_rate'] == Decimal('50.00')
        assert rows[1]['total_claims'] == 1

    def test_deal_breakdown(self, claim_funnel, vendor, in_store_deal):
        rows = ClaimReports.deal_breakdown(vendor_id=vendor.id)

        assert len(rows) == 1
        assert rows[0]['deal_id'] == in_store_deal.id
        assert rows[0]['used_claims'] == 1
        assert rows[0]['total_savings'] == Decimal('100.00')

    @pytest.mark.parametrize('effective_status,expected', [
        (ClaimStatus.CLAIMED, 'open'),
        (ClaimStatus.VERIFIED, 'verified'),
        (ClaimStatus.USED, 'used'),
        (ClaimStatus.EXPIRED, 'expired'),
    ])
    def test_effective_status_filter(self, claim_funnel, vendor, effective_status, expected):
        claims = ClaimReports.filtered_claims(vendor_id=vendor.id)

        matched = ClaimReports.with_effective_status(claims, effective_status)

        assert list(matched.values_list('id', flat=True)) == [claim_funnel[expected].id]
