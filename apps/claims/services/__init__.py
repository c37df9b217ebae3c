"""Services for claim issuance, verification and POS checkout."""

from .exceptions import (
    ClaimsServiceError,
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
from .codes import generate_claim_code, normalize_code, mask_code
from .issuance import (
    ClaimIssuance,
    issue_claim,
    create_claim_record,
    build_qr_payload,
    get_customer_claim,
)
from .membership import (
    MembershipTokenBundle,
    issue_membership_token,
    decode_membership_token,
    render_membership_qr,
)
from .verification import (
    verify_claim_code,
    verify_claim_qr,
    verify_membership_token,
    verify_deal_pin,
)
from .transactions import (
    calculate_savings,
    complete_transaction,
    complete_pin_transaction,
)
from .pos_sessions import (
    open_session,
    close_session,
    get_vendor_session,
    record_session_sale,
)
from .reporting import ClaimReports

__all__ = [
    # Exceptions
    'ClaimsServiceError',
    'ClaimCodeGenerationError',
    'CodeNotFoundError',
    'CodeExpiredError',
    'CodeAlreadyUsedError',
    'AlreadyVerifiedError',
    'WrongVendorError',
    'InvalidQRPayloadError',
    'InvalidPinError',
    'TokenInvalidError',
    'TokenExpiredError',
    'ClaimNotFoundError',
    'ClaimNotVerifiedError',
    'ClaimExpiredError',
    'AlreadyUsedError',
    'InvalidBillAmountError',
    'InvalidDiscountAmountError',
    'InvalidPaymentMethodError',
    'PosSessionNotFoundError',
    'PosSessionClosedError',
    # Codes
    'generate_claim_code',
    'normalize_code',
    'mask_code',
    # Issuance
    'ClaimIssuance',
    'issue_claim',
    'create_claim_record',
    'build_qr_payload',
    'get_customer_claim',
    # Membership tokens
    'MembershipTokenBundle',
    'issue_membership_token',
    'decode_membership_token',
    'render_membership_qr',
    # Verification
    'verify_claim_code',
    'verify_claim_qr',
    'verify_membership_token',
    'verify_deal_pin',
    # Transactions
    'calculate_savings',
    'complete_transaction',
    'complete_pin_transaction',
    # POS sessions
    'open_session',
    'close_session',
    'get_vendor_session',
    'record_session_sale',
    # Reporting
    'ClaimReports',
]
