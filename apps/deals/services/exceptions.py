"""Domain-specific exceptions for deal services."""

from config.exceptions import DomainError, NotFoundError, ConflictError, ValidationFailedError


class DealsServiceError(DomainError):
    """Base exception for deal services."""
    pass


class DealNotFoundError(DealsServiceError, NotFoundError):
    default_code = 'deal_not_found'
    default_detail = 'Deal not found.'


class VendorNotFoundError(DealsServiceError, NotFoundError):
    default_code = 'vendor_not_found'
    default_detail = 'Vendor not found.'


class DealInactiveError(DealsServiceError, ConflictError):
    """Raised when a deal is deactivated or not yet approved."""
    default_code = 'deal_inactive'
    default_detail = 'Deal is not active.'


class DealExpiredError(DealsServiceError, ConflictError):
    default_code = 'deal_expired'
    default_detail = 'Deal has expired.'


class RedemptionCapReachedError(DealsServiceError, ConflictError):
    """Raised when a deal has no redemptions left."""
    default_code = 'redemption_cap_reached'
    default_detail = 'Deal has reached its maximum number of redemptions.'


class InvalidDealError(DealsServiceError, ValidationFailedError):
    """Raised when deal data breaks a kind-specific invariant."""
    default_code = 'invalid_deal'
    default_detail = 'Deal data is invalid.'
