import uuid
from decimal import Decimal

import pytest

from apps.accounts.services import (
    authenticate_user,
    credit_savings,
    get_savings_snapshot,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
)


@pytest.mark.django_db
class TestAuthenticateUser:

    def test_valid_credentials(self, user):
        result = authenticate_user(email=user.email, password='TestPass123!')
        assert result == user
        assert result.last_login is not None

    def test_email_is_case_insensitive(self, user):
        result = authenticate_user(email='TestUser@Example.com', password='TestPass123!')
        assert result == user

    def test_wrong_password(self, user):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email=user.email, password='nope')

    def test_inactive(self, user_inactive):
        with pytest.raises(InactiveAccountError):
            authenticate_user(email=user_inactive.email, password='TestPass123!')


@pytest.mark.django_db
class TestCreditSavings:

    def test_increments_both_counters(self, user):
        credit_savings(customer_id=user.id, amount=Decimal('25.50'))
        credit_savings(customer_id=user.id, amount=Decimal('4.50'))

        user.refresh_from_db()
        assert user.total_savings == Decimal('30.00')
        assert user.deals_claimed == 2

    def test_snapshot_reads_fresh_values(self, user):
        credit_savings(customer_id=user.id, amount=Decimal('10.00'))

        # The in-memory instance is stale on purpose
        snapshot = get_savings_snapshot(user)
        assert snapshot == {'total_savings': Decimal('10.00'), 'deals_claimed': 1}

    def test_unknown_customer(self, db):
        with pytest.raises(UserNotFoundError):
            credit_savings(customer_id=uuid.uuid4(), amount=Decimal('1.00'))
