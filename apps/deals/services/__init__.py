"""Services for deal catalogue business logic."""

from .exceptions import (
    DealsServiceError,
    DealNotFoundError,
    VendorNotFoundError,
    DealInactiveError,
    DealExpiredError,
    RedemptionCapReachedError,
    InvalidDealError,
)
from .deal_management import (
    get_vendor,
    get_deal,
    generate_deal_pin,
    create_deal,
    ensure_claimable,
    reserve_redemption,
)

__all__ = [
    # Exceptions
    'DealsServiceError',
    'DealNotFoundError',
    'VendorNotFoundError',
    'DealInactiveError',
    'DealExpiredError',
    'RedemptionCapReachedError',
    'InvalidDealError',
    # Services
    'get_vendor',
    'get_deal',
    'generate_deal_pin',
    'create_deal',
    'ensure_claimable',
    'reserve_redemption',
]
