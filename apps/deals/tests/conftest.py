import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.deals.models import Deal, DealKind, Vendor


def client_for(user):
    """Return an API client authenticated as the given user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def customer(db):
    """Create and return a customer."""
    return User.objects.create_user(
        email='customer@example.com',
        password='TestPass123!',
        display_name='Asha Customer',
    )


@pytest.fixture
def vendor_user(db):
    """Create and return a vendor account."""
    return User.objects.create_user(
        email='vendor@example.com',
        password='TestPass123!',
        display_name='Cafe Owner',
        role=UserRole.VENDOR,
    )


@pytest.fixture
def vendor(vendor_user):
    """Create and return an approved vendor profile."""
    return Vendor.objects.create(
        user=vendor_user,
        business_name='Blue Tokai Cafe',
        city='Bengaluru',
        is_approved=True,
    )


@pytest.fixture
def other_vendor(db):
    """A second vendor with its own account."""
    user = User.objects.create_user(
        email='other-vendor@example.com',
        password='TestPass123!',
        role=UserRole.VENDOR,
    )
    return Vendor.objects.create(user=user, business_name='Third Wave', is_approved=True)


@pytest.fixture
def in_store_deal(vendor):
    """Approved in-store deal with a PIN."""
    return Deal.objects.create(
        vendor=vendor,
        title='20% off any coffee',
        kind=DealKind.IN_STORE,
        discount_percentage=20,
        verification_code='CAFE20',
        is_approved=True,
        valid_until=timezone.now() + timedelta(days=7),
    )


@pytest.fixture
def online_deal(vendor):
    """Approved, monetized online deal."""
    vendor.commission_enabled = True
    vendor.save(update_fields=['commission_enabled'])
    return Deal.objects.create(
        vendor=vendor,
        title='15% off beans online',
        kind=DealKind.ONLINE,
        discount_percentage=15,
        original_price=Decimal('1000.00'),
        discounted_price=Decimal('850.00'),
        affiliate_link='https://shop.example.com/beans?ref=dealz',
        is_approved=True,
        valid_until=timezone.now() + timedelta(days=30),
    )


@pytest.fixture
def customer_client(customer):
    return client_for(customer)


@pytest.fixture
def vendor_client(vendor):
    return client_for(vendor.user)
