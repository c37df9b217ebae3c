"""Domain-specific exceptions for claim, verification and POS services."""

from rest_framework import status

from config.exceptions import (
    DomainError,
    NotFoundError,
    ConflictError,
    ForbiddenError,
    UnauthorizedError,
    ValidationFailedError,
)


class ClaimsServiceError(DomainError):
    """Base exception for claim services."""
    pass


# Issuance

class ClaimCodeGenerationError(ClaimsServiceError):
    """Raised when no unique claim code could be produced."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = 'claim_code_generation_failed'
    default_detail = 'Could not generate a unique claim code, please retry.'


# Verification

class CodeNotFoundError(ClaimsServiceError, NotFoundError):
    default_code = 'code_not_found'
    default_detail = 'Claim code not found.'


class CodeExpiredError(ClaimsServiceError, ConflictError):
    default_code = 'code_expired'
    default_detail = 'Claim code has expired.'


class CodeAlreadyUsedError(ClaimsServiceError, ConflictError):
    default_code = 'code_already_used'
    default_detail = 'Claim code has already been used.'


class AlreadyVerifiedError(ClaimsServiceError, ConflictError):
    default_code = 'already_verified'
    default_detail = 'Claim code has already been verified.'


class WrongVendorError(ClaimsServiceError, ForbiddenError):
    """Raised when a vendor touches a claim for another vendor's deal."""
    default_code = 'wrong_vendor'
    default_detail = 'This claim belongs to a different vendor.'


class InvalidQRPayloadError(ClaimsServiceError, ValidationFailedError):
    default_code = 'invalid_qr_payload'
    default_detail = 'QR payload is not a valid claim code.'


class InvalidPinError(ClaimsServiceError, ValidationFailedError):
    default_code = 'invalid_pin'
    default_detail = 'PIN does not match any active deal.'


class TokenInvalidError(ClaimsServiceError, UnauthorizedError):
    default_code = 'token_invalid'
    default_detail = 'Membership token is invalid.'


class TokenExpiredError(ClaimsServiceError, UnauthorizedError):
    default_code = 'token_expired'
    default_detail = 'Membership token has expired.'


# Transactions

class ClaimNotFoundError(ClaimsServiceError, NotFoundError):
    default_code = 'claim_not_found'
    default_detail = 'Claim not found.'


class ClaimNotVerifiedError(ClaimsServiceError, ConflictError):
    default_code = 'claim_not_verified'
    default_detail = 'Claim must be verified before completing the transaction.'


class ClaimExpiredError(ClaimsServiceError, ConflictError):
    default_code = 'claim_expired'
    default_detail = 'Claim has expired.'


class AlreadyUsedError(ClaimsServiceError, ConflictError):
    default_code = 'already_used'
    default_detail = 'Claim has already been used.'


class InvalidBillAmountError(ClaimsServiceError, ValidationFailedError):
    default_code = 'invalid_bill_amount'
    default_detail = 'Bill amount must be greater than zero.'


class InvalidDiscountAmountError(ClaimsServiceError, ValidationFailedError):
    default_code = 'invalid_discount_amount'
    default_detail = 'Discount must be between zero and the bill amount.'


class InvalidPaymentMethodError(ClaimsServiceError, ValidationFailedError):
    default_code = 'invalid_payment_method'
    default_detail = 'Unsupported payment method.'


# POS sessions

class PosSessionNotFoundError(ClaimsServiceError, NotFoundError):
    default_code = 'pos_session_not_found'
    default_detail = 'POS session not found.'


class PosSessionClosedError(ClaimsServiceError, ConflictError):
    default_code = 'pos_session_closed'
    default_detail = 'POS session is closed.'
