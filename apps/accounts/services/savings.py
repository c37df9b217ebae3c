"""Customer savings counters."""

import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import F

from .exceptions import UserNotFoundError

User = get_user_model()

logger = logging.getLogger(__name__)


def credit_savings(*, customer_id, amount: Decimal, deals: int = 1) -> None:
    """
    Add a completed redemption to the customer's running counters.

    Both counters are bumped with a single UPDATE using F() expressions,
    so concurrent redemptions for the same customer never lose an increment.
    Callers are expected to wrap this in their own transaction.

    Args:
        customer_id: UUID of the customer
        amount: Savings granted by the redemption (already rounded)
        deals: Number of redemptions to add (default 1)

    Raises:
        UserNotFoundError: If the customer row does not exist
    """
    updated = User.objects.filter(id=customer_id).update(
        total_savings=F('total_savings') + amount,
        deals_claimed=F('deals_claimed') + deals,
    )
    if not updated:
        raise UserNotFoundError(f"User {customer_id} not found")

    logger.debug("Credited %s savings to customer %s", amount, customer_id)


def get_savings_snapshot(customer) -> dict:
    """Return fresh savings counters for a customer."""
    row = (
        User.objects
        .filter(id=customer.id)
        .values('total_savings', 'deals_claimed')
        .first()
    )
    if row is None:
        raise UserNotFoundError(f"User {customer.id} not found")
    return {
        'total_savings': row['total_savings'],
        'deals_claimed': row['deals_claimed'],
    }
