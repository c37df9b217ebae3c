import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.commissions.models import CommissionEvent, EventStatus, EventType
from apps.deals.models import Deal, DealKind, Vendor


def client_for(user):
    """Return an API client authenticated as the given user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def make_event(deal, occurred_at, commission_amount, status=EventStatus.CONFIRMED):
    """Ledger row at a fixed time, bypassing the click/confirm flow."""
    return CommissionEvent.objects.create(
        vendor=deal.vendor,
        deal=deal,
        event_type=EventType.CONVERSION if status != EventStatus.PENDING else EventType.CLICK,
        occurred_at=occurred_at,
        commission_rate=Decimal('10.00'),
        sale_amount=commission_amount * 10,
        commission_amount=commission_amount,
        status=status,
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return a platform admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Ops Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        email='customer@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def vendor(db):
    """Vendor with affiliate commission and custom rates."""
    user = User.objects.create_user(
        email='vendor@example.com',
        password='TestPass123!',
        role=UserRole.VENDOR,
    )
    return Vendor.objects.create(
        user=user,
        business_name='Bean Shop',
        is_approved=True,
        commission_enabled=True,
        click_commission_rate=Decimal('5.00'),
        conversion_commission_rate=Decimal('8.00'),
    )


@pytest.fixture
def other_vendor(db):
    """Vendor relying on the platform default rates."""
    user = User.objects.create_user(
        email='other-vendor@example.com',
        password='TestPass123!',
        role=UserRole.VENDOR,
    )
    return Vendor.objects.create(
        user=user,
        business_name='Gear Store',
        is_approved=True,
        commission_enabled=True,
    )


@pytest.fixture
def online_deal(vendor):
    return Deal.objects.create(
        vendor=vendor,
        title='Single origin 250g',
        kind=DealKind.ONLINE,
        discount_percentage=10,
        original_price=Decimal('500.00'),
        affiliate_link='https://shop.example.com/p/1?ref=dealz',
        is_approved=True,
        valid_until=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def other_online_deal(other_vendor):
    return Deal.objects.create(
        vendor=other_vendor,
        title='Grinder',
        kind=DealKind.ONLINE,
        discount_percentage=5,
        affiliate_link='https://gear.example.com/grinder',
        is_approved=True,
        valid_until=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def vendor_client(vendor):
    return client_for(vendor.user)


@pytest.fixture
def customer_client(customer):
    return client_for(customer)


@pytest.fixture
def event_factory(db):
    """Return a helper that writes ledger rows at fixed times."""
    return make_event
